import threading

from flask import Flask, request

from config import Konfigurasi
from services.admin_handler import handle_admin_action
from services.antrian import LayananAntrian
from services.whatsapp_handler import proses_event
from tools.authorizer import buat_authorizer
from tools.firebase_store import FirebaseStore
from tools.whatsapp_sender import PengirimWhatsApp


def jalankan_di_latar(fungsi, *args):
    """Jalankan fungsi di thread terpisah supaya webhook bisa langsung dibalas."""
    thread = threading.Thread(target=fungsi, args=args, daemon=True)
    thread.start()
    return thread


def create_app(konfigurasi=None, store=None, pengirim=None, authorizer=None, jalankan=None, jam=None):
    konfigurasi = konfigurasi or Konfigurasi.dari_env()
    jalankan = jalankan or jalankan_di_latar

    if store is None:
        store = FirebaseStore(
            konfigurasi.database_url,
            nama_file_kredensial=konfigurasi.nama_file_kredensial,
            db_secret=konfigurasi.firebase_db_secret,
            timeout=konfigurasi.http_timeout,
        )
    if pengirim is None:
        pengirim = PengirimWhatsApp(
            konfigurasi.access_token,
            konfigurasi.phone_id,
            grup=konfigurasi.grup,
            api_version=konfigurasi.graph_api_version,
            timeout=konfigurasi.http_timeout,
        )
    if authorizer is None:
        authorizer = buat_authorizer(konfigurasi)

    layanan = LayananAntrian(store, zona=konfigurasi.zona_waktu, jam=jam)

    # Inisialisasi Flask
    app = Flask(__name__)

    @app.route("/")
    def home():
        return "Bot antrian pangkalan jalan ✅"

    @app.route("/webhook", methods=["GET", "POST"])
    def whatsapp_webhook():
        """Verifikasi webhook dari Meta (GET) dan event pesan WhatsApp (POST)."""
        if request.method == "GET":
            mode = request.args.get("hub.mode")
            token = request.args.get("hub.verify_token")
            challenge = request.args.get("hub.challenge", "")

            if mode == "subscribe" and konfigurasi.verify_token and token == konfigurasi.verify_token:
                return challenge, 200
            return "Verification failed", 403

        payload = request.get_json(silent=True) or {}
        # Balas 200 dulu, proses belakangan
        jalankan(proses_event, payload, layanan, pengirim)
        return "EVENT_RECEIVED", 200

    @app.route("/admin", methods=["GET", "POST", "PUT", "DELETE"])
    def admin_action():
        """Endpoint admin panel: ?action=panggil|selesai|hapus&lokasi=...&noPol=..."""
        return handle_admin_action(
            request,
            layanan,
            authorizer,
            lambda outbox: jalankan(pengirim.kirim_semua, outbox),
        )

    return app


_app = None


def _app_dari_env():
    konfigurasi = Konfigurasi.dari_env()
    konfigurasi.validasi()
    return create_app(konfigurasi)


def __getattr__(name):
    # WSGI host (gunicorn app:app) minta `app`; dibuat sekali dari .env saat pertama diakses
    global _app
    if name != "app":
        raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
    if _app is None:
        _app = _app_dari_env()
    return _app


if __name__ == "__main__":
    _app_dari_env().run(debug=True)
