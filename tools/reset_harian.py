# tools/reset_harian.py
from datetime import datetime
from zoneinfo import ZoneInfo

ZONA_DEFAULT = "Asia/Jakarta"


def hari_ini(zona=ZONA_DEFAULT, sekarang=None):
    """Tanggal kalender (YYYY-MM-DD) di zona waktu pangkalan."""
    tz = ZoneInfo(zona)
    if sekarang is None:
        sekarang = datetime.now(tz)
    else:
        sekarang = sekarang.astimezone(tz)
    return sekarang.strftime("%Y-%m-%d")


def pastikan_reset_harian(store, lokasi, zona=ZONA_DEFAULT, sekarang=None):
    """
    Kosongkan antrian lokasi sekali per hari (jam 00:00 WIB).
    Return True kalau barusan di-reset, False kalau sudah di-reset hari ini.
    """
    tanggal = hari_ini(zona, sekarang)
    if store.get_reset_marker(lokasi) == tanggal:
        return False

    store.reset_location(lokasi, tanggal)
    print(f"🧹 Antrian {lokasi} di-reset untuk {tanggal}")
    return True
