# tools/whatsapp_sender.py
import requests

GRAPH_URL = "https://graph.facebook.com"


class PengirimWhatsApp:
    """Kirim pesan teks lewat WhatsApp Cloud API. Gagal kirim cuma di-log, nggak di-retry."""

    def __init__(self, access_token, phone_id, grup=None, api_version="v19.0", timeout=15.0):
        self.url = f"{GRAPH_URL}/{api_version}/{phone_id}/messages"
        self.headers = {
            "Authorization": f"Bearer {access_token}",
            "Content-Type": "application/json",
        }
        self.grup = grup or {}
        self.timeout = timeout

    def kirim_pesan(self, ke, teks):
        payload = {
            "messaging_product": "whatsapp",
            "to": ke,
            "text": {"body": teks},
        }
        try:
            resp = requests.post(self.url, headers=self.headers, json=payload, timeout=self.timeout)
            if resp.status_code >= 300:
                print(f"❌ Gagal kirim ke {ke}: {resp.status_code} {resp.text[:300]}")
                return False
        except requests.RequestException as e:
            print(f"❌ Error kirim ke {ke}: {e}")
            return False

        print(f"✅ Pesan terkirim ke {ke}")
        return True

    def kirim_ke_grup(self, lokasi, teks):
        group_id = self.grup.get(lokasi)
        if not group_id:
            return False
        return self.kirim_pesan(group_id, teks)

    def kirim_semua(self, outbox):
        """Kirim berurutan semua pesan hasil satu operasi antrian."""
        for pesan in outbox:
            if pesan.lokasi_grup:
                self.kirim_ke_grup(pesan.lokasi_grup, pesan.teks)
            else:
                self.kirim_pesan(pesan.ke, pesan.teks)
