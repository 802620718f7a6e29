import copy
import itertools
from datetime import datetime, timedelta, timezone

import pytest

from app import create_app
from config import Konfigurasi
from services.antrian import LayananAntrian
from tools.authorizer import KunciStatis

MULAI = datetime(2024, 5, 1, 2, 0, tzinfo=timezone.utc)  # 09:00 WIB


class MemoryStore:
    """Pengganti FirebaseStore di memori, layout datanya sama."""

    def __init__(self):
        self.data = {}
        self.penanda = {}
        self.jumlah_reset = 0

    def get_location_queue(self, lokasi):
        return copy.deepcopy(self.data.get(lokasi, {}))

    def get_entry(self, lokasi, no_pol):
        return copy.deepcopy(self.data.get(lokasi, {}).get(no_pol))

    def put_entry(self, lokasi, entri):
        self.data.setdefault(lokasi, {})[entri["noPol"]] = dict(entri)

    def update_entry_status(self, lokasi, no_pol, status):
        self.data.setdefault(lokasi, {}).setdefault(no_pol, {})["status"] = status

    def delete_entry(self, lokasi, no_pol):
        self.data.get(lokasi, {}).pop(no_pol, None)

    def get_reset_marker(self, lokasi):
        return self.penanda.get(lokasi)

    def set_reset_marker(self, lokasi, tanggal):
        self.penanda[lokasi] = tanggal

    def reset_location(self, lokasi, tanggal):
        self.jumlah_reset += 1
        self.data.pop(lokasi, None)
        self.penanda[lokasi] = tanggal


class PengirimPalsu:
    """Nyatet semua pesan yang mau dikirim."""

    def __init__(self):
        self.terkirim = []

    def kirim_semua(self, outbox):
        self.terkirim.extend(outbox)

    def ke(self, nomor):
        return [p.teks for p in self.terkirim if p.ke == nomor]

    def ke_grup(self, lokasi):
        return [p.teks for p in self.terkirim if p.lokasi_grup == lokasi]


class Jam:
    """Jam palsu: tiap dipanggil maju satu detik."""

    def __init__(self, mulai=MULAI):
        self._detik = itertools.count()
        self.mulai = mulai

    def __call__(self):
        return self.mulai + timedelta(seconds=next(self._detik))


def jalankan_langsung(fungsi, *args):
    fungsi(*args)


@pytest.fixture
def store():
    return MemoryStore()


@pytest.fixture
def pengirim():
    return PengirimPalsu()


@pytest.fixture
def jam():
    return Jam()


@pytest.fixture
def layanan(store, jam):
    return LayananAntrian(store, jam=jam)


@pytest.fixture
def konfigurasi():
    return Konfigurasi(
        verify_token="rahasia-verify",
        access_token="token",
        phone_id="12345",
        database_url="https://antrian-test.firebaseio.com",
        admin_key="kunci-admin",
    )


@pytest.fixture
def app(konfigurasi, store, pengirim, jam):
    app = create_app(
        konfigurasi,
        store=store,
        pengirim=pengirim,
        authorizer=KunciStatis(konfigurasi.admin_key),
        jalankan=jalankan_langsung,
        jam=jam,
    )
    app.config["TESTING"] = True
    return app


@pytest.fixture
def client(app):
    return app.test_client()
