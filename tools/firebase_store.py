# tools/firebase_store.py
from urllib.parse import quote

import requests
from oauth2client.service_account import ServiceAccountCredentials

SCOPE = [
    "https://www.googleapis.com/auth/firebase.database",
    "https://www.googleapis.com/auth/userinfo.email",
]
ROOT = "pangkalan"


class FirebaseError(Exception):
    def __init__(self, status_code, body):
        super().__init__(f"Firebase response {status_code}: {body}")
        self.status_code = status_code


class FirebaseStore:
    """
    Akses Realtime Database lewat REST API.

    Layout data:
      pangkalan/{lokasi}/antrian/{noPol} -> {noPol, from, status, createdAt}
      pangkalan/{lokasi}/_meta           -> {lastReset}
    """

    def __init__(self, database_url, nama_file_kredensial="", db_secret="", timeout=15.0, session=None):
        if not database_url:
            raise RuntimeError("❌ DATABASE_URL belum diset di .env")
        self.base_url = database_url.rstrip("/")
        self.nama_file_kredensial = nama_file_kredensial
        self.db_secret = db_secret
        self.timeout = timeout
        self.session = session or requests.Session()
        self._creds = None

    # --- Otentikasi ---
    def _params(self):
        if self.nama_file_kredensial:
            if self._creds is None:
                self._creds = ServiceAccountCredentials.from_json_keyfile_name(self.nama_file_kredensial, SCOPE)
            # get_access_token() otomatis refresh kalau token sudah expired
            return {"access_token": self._creds.get_access_token().access_token}
        if self.db_secret:
            return {"auth": self.db_secret}
        return {}

    def _url(self, *parts):
        return f"{self.base_url}/{'/'.join(quote(p, safe='') for p in (ROOT,) + parts)}.json"

    def _request(self, method, url, payload=None):
        kwargs = {"params": self._params(), "timeout": self.timeout}
        if method in ("PUT", "PATCH"):
            kwargs["json"] = payload
        resp = self.session.request(method, url, **kwargs)
        if not resp.ok:
            raise FirebaseError(resp.status_code, resp.text)
        return resp.json() if resp.content else None

    # --- Antrian ---
    def get_location_queue(self, lokasi):
        return self._request("GET", self._url(lokasi, "antrian")) or {}

    def get_entry(self, lokasi, no_pol):
        return self._request("GET", self._url(lokasi, "antrian", no_pol))

    def put_entry(self, lokasi, entri):
        self._request("PUT", self._url(lokasi, "antrian", entri["noPol"]), entri)

    def update_entry_status(self, lokasi, no_pol, status):
        self._request("PATCH", self._url(lokasi, "antrian", no_pol), {"status": status})

    def delete_entry(self, lokasi, no_pol):
        self._request("DELETE", self._url(lokasi, "antrian", no_pol))

    # --- Penanda reset harian ---
    def get_reset_marker(self, lokasi):
        meta = self._request("GET", self._url(lokasi, "_meta")) or {}
        return meta.get("lastReset")

    def set_reset_marker(self, lokasi, tanggal):
        self._request("PUT", self._url(lokasi, "_meta"), {"lastReset": tanggal})

    def reset_location(self, lokasi, tanggal):
        # Multi-path update: hapus antrian + tulis penanda dalam satu tulisan atomik
        self._request("PATCH", self._url(lokasi), {"antrian": None, "_meta": {"lastReset": tanggal}})
