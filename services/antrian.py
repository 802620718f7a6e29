import re
import threading
from collections import namedtuple
from datetime import datetime, timezone

from tools.reset_harian import ZONA_DEFAULT, pastikan_reset_harian

# Status antrian (string yang tersimpan di database)
AKTIF = "aktif"
BUFFER = "buffer"
SELESAI = "selesai"

# Maksimal kendaraan berstatus aktif di lobby per lokasi
KAPASITAS_LOBBY = 3

# Lokasi pangkalan + perintah WhatsApp masing-masing
LOKASI = {
    "mall_nusantara": {"daftar": "#daftarantrian", "list": "#updateantrian"},
    "stasiun_jatinegara": {"daftar": "#daftarlist", "list": "#updatelist"},
}

# Nomor polisi jadi key Firebase: cuma huruf besar, angka, dan strip
POLA_NOPOL = re.compile(r"^[A-Z0-9-]+$")

# Pesan keluar: ke nomor (ke) atau ke grup lokasi (lokasi_grup)
Pesan = namedtuple("Pesan", ["ke", "teks", "lokasi_grup"])


def nopol_valid(no_pol):
    return bool(POLA_NOPOL.match(no_pol))


def balasan(ke, teks):
    return Pesan(ke, teks, None)


def siaran(lokasi, teks):
    return Pesan(None, teks, lokasi)


class EntriTidakDitemukan(Exception):
    pass


class NomorTidakTersimpan(Exception):
    pass


def _sekarang_utc():
    return datetime.now(timezone.utc)


def format_waktu(waktu):
    """ISO-8601 UTC dengan milidetik dan akhiran Z, contoh 2024-05-01T03:04:05.678Z"""
    return waktu.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def urutkan(entri_list):
    """Urut dari yang paling dulu daftar; kalau createdAt sama, pakai noPol."""
    return sorted(entri_list, key=lambda e: (e.get("createdAt") or "", e.get("noPol") or ""))


class LayananAntrian:
    """
    State machine antrian per lokasi: daftar, list, panggil, selesai, hapus.

    Semua operasi jalan di bawah lock per lokasi (reset harian juga), jadi
    hitung-aktif-lalu-tulis nggak bisa balapan di dalam satu proses.
    Setiap operasi me-return list Pesan; pengirimannya urusan pemanggil.
    """

    def __init__(self, store, zona=ZONA_DEFAULT, jam=None):
        self.store = store
        self.zona = zona
        self.jam = jam or _sekarang_utc
        self._kunci = {}
        self._kunci_meta = threading.Lock()

    def _kunci_lokasi(self, lokasi):
        with self._kunci_meta:
            return self._kunci.setdefault(lokasi, threading.Lock())

    def _reset_harian(self, lokasi):
        pastikan_reset_harian(self.store, lokasi, zona=self.zona, sekarang=self.jam())

    # --- Customer ---
    def daftar(self, dari, teks, lokasi):
        parts = teks.split()
        no_pol = parts[1].upper() if len(parts) > 1 else ""

        if not no_pol:
            return [balasan(dari, f"❌ Format: {LOKASI[lokasi]['daftar']} B1234XYZ")]
        if not nopol_valid(no_pol):
            return [balasan(dari, f"❌ Nomor polisi {no_pol} tidak valid. Pakai huruf dan angka saja.")]

        with self._kunci_lokasi(lokasi):
            self._reset_harian(lokasi)
            semua = self.store.get_location_queue(lokasi).values()
            jumlah_aktif = sum(1 for e in semua if e.get("status") == AKTIF)
            status = BUFFER if jumlah_aktif >= KAPASITAS_LOBBY else AKTIF

            self.store.put_entry(lokasi, {
                "noPol": no_pol,
                "from": dari,
                "status": status,
                "createdAt": format_waktu(self.jam()),
            })

        print(f"📝 {no_pol} masuk antrian {lokasi} sebagai {status}")
        return [
            balasan(dari, f"✅ {no_pol} terdaftar sebagai {status}"),
            siaran(lokasi, f"🆕 Antrian baru: {no_pol} ({status})"),
        ]

    def update_list(self, dari, lokasi):
        with self._kunci_lokasi(lokasi):
            self._reset_harian(lokasi)
            data = self.store.get_location_queue(lokasi)

        if not data:
            return [balasan(dari, "📋 Belum ada antrian.")]

        baris = [
            f"{i}. {e.get('noPol')} ({e.get('status')})"
            for i, e in enumerate(urutkan(data.values()), start=1)
        ]
        return [balasan(dari, "📋 Antrian:\n" + "\n".join(baris))]

    # --- Admin ---
    def panggil(self, lokasi, no_pol):
        with self._kunci_lokasi(lokasi):
            self._reset_harian(lokasi)
            entri = self.store.get_entry(lokasi, no_pol)

        if not entri:
            raise EntriTidakDitemukan(no_pol)
        if not entri.get("from"):
            raise NomorTidakTersimpan(no_pol)

        return [
            balasan(entri["from"], f"📣 {no_pol} silakan menuju lobby"),
            siaran(lokasi, f"📣 Memanggil: {no_pol}"),
        ]

    def selesai(self, lokasi, no_pol):
        outbox = []
        with self._kunci_lokasi(lokasi):
            self._reset_harian(lokasi)
            if not self.store.get_entry(lokasi, no_pol):
                raise EntriTidakDitemukan(no_pol)

            self.store.update_entry_status(lokasi, no_pol, SELESAI)

            semua = list(self.store.get_location_queue(lokasi).values())
            aktif = [e for e in semua if e.get("status") == AKTIF]
            buffer = [e for e in semua if e.get("status") == BUFFER]

            # Promosi: maksimal satu per panggilan selesai
            if len(aktif) < KAPASITAS_LOBBY and buffer:
                naik = urutkan(buffer)[0]
                self.store.update_entry_status(lokasi, naik["noPol"], AKTIF)
                print(f"⬆️ {naik['noPol']} naik jadi aktif di {lokasi}")
                if naik.get("from"):
                    outbox.append(balasan(naik["from"], f"🔔 {naik['noPol']} sekarang aktif"))

        outbox.append(siaran(lokasi, f"✅ Selesai: {no_pol}"))
        return outbox

    def hapus(self, lokasi, no_pol):
        with self._kunci_lokasi(lokasi):
            self._reset_harian(lokasi)
            if not self.store.get_entry(lokasi, no_pol):
                raise EntriTidakDitemukan(no_pol)
            self.store.delete_entry(lokasi, no_pol)

        return [siaran(lokasi, f"🗑️ Dihapus: {no_pol}")]
