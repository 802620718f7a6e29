# tools/authorizer.py
import hmac

import requests

LOOKUP_URL = "https://identitytoolkit.googleapis.com/v1/accounts:lookup"

# Method wajib per aksi, cuma berlaku di mode bearer
METHOD_AKSI = {
    "panggil": "POST",
    "selesai": "PUT",
    "hapus": "DELETE",
}


class KunciStatis:
    """Admin cukup kirim ?admin_key=... yang sama dengan ADMIN_KEY."""

    cek_method = False

    def __init__(self, admin_key):
        self.admin_key = admin_key or ""

    def izinkan(self, request):
        diberikan = request.args.get("admin_key") or ""
        if not self.admin_key or not diberikan:
            return False
        return hmac.compare_digest(diberikan.encode(), self.admin_key.encode())


class TokenBearer:
    """Admin login lewat Firebase Auth, kirim ID token di header Authorization."""

    cek_method = True

    def __init__(self, api_key, timeout=15.0):
        self.api_key = api_key
        self.timeout = timeout

    def izinkan(self, request):
        header = request.headers.get("Authorization", "")
        if not header.startswith("Bearer "):
            return False
        id_token = header[len("Bearer "):].strip()
        if not id_token or not self.api_key:
            return False

        try:
            resp = requests.post(
                LOOKUP_URL,
                params={"key": self.api_key},
                json={"idToken": id_token},
                timeout=self.timeout,
            )
            if resp.status_code != 200:
                print(f"⚠️ Token admin ditolak: {resp.status_code}")
                return False
            # Balasan 200 yang bukan JSON dianggap token nggak valid
            return bool(resp.json().get("users"))
        except (requests.RequestException, ValueError) as e:
            print(f"❌ Gagal verifikasi token admin: {e}")
            return False


def buat_authorizer(konfigurasi):
    if konfigurasi.admin_auth_mode == "bearer":
        return TokenBearer(konfigurasi.firebase_api_key, timeout=konfigurasi.http_timeout)
    return KunciStatis(konfigurasi.admin_key)
