from services.antrian import LOKASI, EntriTidakDitemukan, NomorTidakTersimpan, nopol_valid
from tools.authorizer import METHOD_AKSI


def handle_admin_action(request, layanan, authorizer, kirim_latar):
    """
    Aksi admin panel: panggil / selesai / hapus.
    Return (body, status_code). Notifikasi dikirim di background setelah
    data di database sudah berubah.
    """
    if not authorizer.izinkan(request):
        return "Unauthorized", 401

    action = request.args.get("action")
    lokasi = request.args.get("lokasi")
    no_pol = (request.args.get("noPol") or "").strip().upper()

    if action not in METHOD_AKSI:
        return "Unknown action", 400
    if authorizer.cek_method and request.method != METHOD_AKSI[action]:
        return "Method Not Allowed", 405
    if not lokasi or not no_pol:
        return "Missing lokasi or noPol", 400
    if lokasi not in LOKASI:
        return "Unknown lokasi", 400
    if not nopol_valid(no_pol):
        return "Invalid noPol", 400

    try:
        if action == "panggil":
            outbox = layanan.panggil(lokasi, no_pol)
        elif action == "selesai":
            outbox = layanan.selesai(lokasi, no_pol)
        else:
            outbox = layanan.hapus(lokasi, no_pol)
    except EntriTidakDitemukan:
        return "Not found", 404
    except NomorTidakTersimpan:
        return "No phone stored", 400
    except Exception as e:
        print(f"❌ Admin error ({action} {lokasi}/{no_pol}): {e}")
        return "Server error", 500

    print(f"✅ Admin {action}: {lokasi}/{no_pol}")
    kirim_latar(outbox)
    return "ok", 200
