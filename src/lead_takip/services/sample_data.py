# src/lead_takip/services/sample_data.py
# Demo leads for the "Örnek veri yükle" button and for tests.

SAMPLE_LEADS = [
    {
        "customer_name": "Ahmet Yıldız",
        "request_date": "2025-01-06",
        "lead_type": "satis",
        "assigned_personnel": "Alperen Yerlikaya",
        "status": "Bilgi Verildi",
        "customer_id": "M-1001",
        "first_customer_source": "Instagram",
        "web_form_note": "Ad Soyad : Ahmet Yıldız / Ilgilendigi Gayrimenkul Tipi :Satılık / Model Sanayi Merkezi",
        "last_meeting_result": "Bilgi Verildi",
    },
    {
        "customer_name": "Selin Acar",
        "request_date": "2025-01-14",
        "lead_type": "kiralama",
        "assigned_personnel": "Ahmet Kaya",
        "status": "Olumsuz",
        "customer_id": "M-1002",
        "first_customer_source": "Facebook",
        "web_form_note": "Ilgilendigi Gayrimenkul Tipi :Kiralık / Model Kuyum Merkezi",
        "negative_reason": "Fiyat yüksek",
        "last_meeting_result": "Olumsuz",
    },
    {
        "customer_name": "Kerem Aydın",
        "request_date": "2025-02-03",
        "lead_type": "satis",
        "assigned_personnel": "Alperen Yerlikaya",
        "status": "Satış",
        "customer_id": "M-1003",
        "first_customer_source": "Referans",
        "project_name": "Model Sanayi Merkezi",
        "was_sale_made": "Evet",
        "sale_count": 1,
        "last_meeting_result": "Satış",
    },
    {
        "customer_name": "Deniz Şahin",
        "request_date": "2025-02-11",
        "lead_type": "kiralama",
        "assigned_personnel": "Mehmet Özkan",
        "status": "Takipte",
        "customer_id": "M-1004",
        "first_customer_source": "Instagram",
        "project_name": "Model Sanayi Merkezi",
        "last_meeting_result": "Takipte",
    },
    {
        "customer_name": "Gizem Kurt",
        "request_date": "2025-02-20",
        "lead_type": "satis",
        "assigned_personnel": "Ahmet Kaya",
        "status": "Ulaşılamıyor",
        "customer_id": "M-1005",
        "first_customer_source": "Website",
        "project_name": "Vadi İstanbul",
        "last_meeting_result": "Ulaşılamıyor",
    },
    {
        "customer_name": "Oğuz Demir",
        "request_date": "2025-03-02",
        "lead_type": "satis",
        "assigned_personnel": "Mehmet Özkan",
        "status": "Satış",
        "customer_id": "M-1006",
        "first_customer_source": "Referans",
        "project_name": "Model Sanayi Merkezi",
        "was_sale_made": "Evet",
        "sale_count": 2,
        "last_meeting_result": "Satış",
    },
    {
        "customer_name": "Ebru Çelik",
        "request_date": "2025-03-09",
        "lead_type": "kiralama",
        "assigned_personnel": "Alperen Yerlikaya",
        "status": "Toplantı/Birebir Görüşme",
        "customer_id": "M-1007",
        "first_customer_source": "Google",
        "project_name": "Model Kuyum Merkezi",
        "one_on_one_meeting": "Evet",
        "meeting_date": "2025-03-15",
        "last_meeting_result": "Toplantı/Birebir Görüşme",
    },
    {
        "customer_name": "Tolga Arslan",
        "request_date": "",
        "lead_type": "Tanımsız",
        "assigned_personnel": "Ahmet Kaya",
        "status": "Tanımsız",
        "customer_id": "M-1008",
        "first_customer_source": "Telefon",
        "project_name": "Model Sanayi Merkezi",
    },
]
