import os
from dataclasses import dataclass, field

from dotenv import load_dotenv

# Load environment
load_dotenv()

WAJIB = ("DATABASE_URL", "ACCESS_TOKEN", "PHONE_ID", "VERIFY_TOKEN")


@dataclass
class Konfigurasi:
    verify_token: str = ""
    access_token: str = ""
    phone_id: str = ""
    graph_api_version: str = "v19.0"
    database_url: str = ""
    nama_file_kredensial: str = ""
    firebase_db_secret: str = ""
    firebase_api_key: str = ""
    admin_key: str = ""
    admin_auth_mode: str = "static"
    grup: dict = field(default_factory=dict)
    zona_waktu: str = "Asia/Jakarta"
    http_timeout: float = 15.0

    @classmethod
    def dari_env(cls):
        """Baca semua setting dari environment (dan .env kalau ada)."""
        env = os.environ
        return cls(
            verify_token=env.get("VERIFY_TOKEN", ""),
            access_token=env.get("ACCESS_TOKEN", ""),
            phone_id=env.get("PHONE_ID", ""),
            graph_api_version=env.get("GRAPH_API_VERSION", "v19.0"),
            database_url=env.get("DATABASE_URL", ""),
            nama_file_kredensial=env.get("NAMA_FILE_KREDENSIAL", ""),
            firebase_db_secret=env.get("FIREBASE_DB_SECRET", ""),
            firebase_api_key=env.get("FIREBASE_API_KEY", ""),
            admin_key=env.get("ADMIN_KEY", ""),
            admin_auth_mode=env.get("ADMIN_AUTH_MODE", "static").strip().lower(),
            grup={
                "mall_nusantara": env.get("GROUP_ID_MALL", ""),
                "stasiun_jatinegara": env.get("GROUP_ID_JATINEGARA", ""),
            },
            zona_waktu=env.get("ZONA_WAKTU", "Asia/Jakarta"),
            http_timeout=float(env.get("HTTP_TIMEOUT", "15")),
        )

    def validasi(self):
        kosong = [nama for nama in WAJIB if not getattr(self, nama.lower())]
        if kosong:
            raise RuntimeError(f"❌ {', '.join(kosong)} belum diset di .env")
        if self.admin_auth_mode not in ("static", "bearer"):
            raise RuntimeError(f"❌ ADMIN_AUTH_MODE tidak dikenal: {self.admin_auth_mode}")
