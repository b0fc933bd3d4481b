"""Sample business records for template previews."""

from __future__ import annotations

from typing import Any, Dict

SAMPLE_PROPOSAL: Dict[str, Any] = {
    "id": "sample-proposal",
    "number": "TKL-2024-001",
    "title": "Yazılım Geliştirme Hizmetleri",
    "status": "sent",
    "created_at": "2024-03-15",
    "valid_until": "2024-04-14",
    "currency": "TRY",
    "subtotal": 7000,
    "tax_amount": 1260,
    "total_amount": 8260,
    "payment_terms": "%50 peşin, kalan teslimatta",
    "delivery_terms": "Sipariş onayından itibaren 30 gün",
    "customer": {
        "name": "Ahmet Yılmaz",
        "company": "Yılmaz Teknoloji A.Ş.",
        "email": "ahmet@yilmazteknoloji.com.tr",
        "phone": "+90 212 555 01 02",
        "address": "Levent, İstanbul",
    },
    "employee": {
        "first_name": "Ayşe",
        "last_name": "Demir",
        "phone": "+90 216 555 03 04",
        "email": "ayse.demir@example.com",
    },
    "company": {
        "name": "Örnek Şirket",
        "logo": "",
    },
    "items": [
        {
            "name": "Web Uygulaması",
            "description": "React arayüz geliştirme",
            "quantity": 1,
            "unit": "adet",
            "unit_price": 5000,
            "tax_rate": 18,
            "total_price": 5000,
        },
        {
            "name": "Bakım Desteği",
            "description": "Aylık bakım",
            "quantity": 2,
            "unit": "ay",
            "unit_price": 1000,
            "tax_rate": 18,
            "total_price": 2000,
        },
    ],
}
