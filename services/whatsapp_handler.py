from services.antrian import LOKASI, balasan

HELP_KEYWORDS = ["help", "bantuan", "info", "halo"]


def _tabel_perintah():
    """Prefix perintah -> (aksi, lokasi)."""
    tabel = {}
    for lokasi, perintah in LOKASI.items():
        tabel[perintah["daftar"]] = ("daftar", lokasi)
        tabel[perintah["list"]] = ("list", lokasi)
    return tabel


PERINTAH = _tabel_perintah()


def _pesan_bantuan():
    return (
        "Halo! 👋 Cara pakai bot antrian:\n\n"
        "🏬 *Mall Nusantara*\n"
        "   Daftar: `#daftarantrian B1234XYZ`\n"
        "   Lihat antrian: `#updateantrian`\n\n"
        "🚉 *Stasiun Jatinegara*\n"
        "   Daftar: `#daftarlist B1234XYZ`\n"
        "   Lihat antrian: `#updatelist`"
    )


def ambil_pesan(payload):
    """Ambil (from, teks) dari payload webhook WhatsApp Cloud API, None kalau bukan pesan."""
    try:
        value = payload["entry"][0]["changes"][0]["value"]
        message = value["messages"][0]
    except (KeyError, IndexError, TypeError):
        return None

    dari = message.get("from")
    if not dari:
        return None
    teks = ((message.get("text") or {}).get("body") or "").strip()
    return dari, teks


def handle_whatsapp_message(dari, teks, layanan):
    """Router utama untuk semua pesan masuk dari WhatsApp. Return list Pesan."""
    lower = teks.lower()

    for prefix, (aksi, lokasi) in PERINTAH.items():
        if lower.startswith(prefix):
            if aksi == "daftar":
                return layanan.daftar(dari, teks, lokasi)
            return layanan.update_list(dari, lokasi)

    if lower in HELP_KEYWORDS:
        return [balasan(dari, _pesan_bantuan())]

    return [balasan(dari, "⚠️ Format tidak dikenal.")]


def proses_event(payload, layanan, pengirim):
    """Dijalankan di background setelah webhook sudah dibalas 200."""
    pesan = ambil_pesan(payload)
    if not pesan:
        return

    dari, teks = pesan
    print(f"\n📩 Pesan WhatsApp dari {dari}: {teks!r}")
    try:
        outbox = handle_whatsapp_message(dari, teks, layanan)
        pengirim.kirim_semua(outbox)
    except Exception as e:
        print(f"❌ Error saat proses pesan dari {dari}: {e}")
