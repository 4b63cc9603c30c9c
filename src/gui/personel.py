# src/gui/personel.py
from __future__ import annotations

from datetime import date

import streamlit as st

from gui.helpers import invalidate_caches, load_leads_frame, load_rep_names
from lead_takip.db import get_session
from lead_takip.errors import LeadValidationError
from lead_takip.models import LEAD_TYPES
from lead_takip.services.leads import (
    create_lead,
    create_sales_rep,
    deactivate_sales_rep,
    delete_lead,
    list_sales_reps,
    update_sales_rep,
)


def render_sales_reps() -> None:
    """Sales reps: create, change target, deactivate."""
    st.write("### Satış Personeli")
    with get_session() as sess:
        with st.form("rep_form"):
            name = st.text_input("Ad Soyad")
            target = st.number_input("Aylık hedef (satış)", min_value=0, step=1, value=10)
            create = st.form_submit_button("➕ Ekle")
            if create:
                try:
                    create_sales_rep(sess, {"name": name, "monthly_target": int(target)})
                    invalidate_caches()
                    st.success("Personel kaydedildi.")
                except LeadValidationError as e:
                    st.error(f"Personel kaydedilemedi: {e}")

        reps = list_sales_reps(sess, include_inactive=True)
        st.dataframe(
            [
                {"ID": r.id, "Ad": r.name, "Aylık Hedef": r.monthly_target, "Aktif": "✅" if r.is_active else "❌"}
                for r in reps
            ],
            use_container_width=True,
        )

        active = [r for r in reps if r.is_active]
        if not active:
            return
        st.write("#### Düzenle")
        rep = st.selectbox("Personel", active, format_func=lambda r: f"{r.id} – {r.name}" if r else "-")
        c1, c2 = st.columns(2)
        with c1:
            new_target = st.number_input("Yeni aylık hedef", min_value=0, step=1, value=int(rep.monthly_target))
            if st.button("💾 Hedefi kaydet"):
                update_sales_rep(sess, rep.id, {"monthly_target": int(new_target)})
                invalidate_caches()
                st.success("Hedef güncellendi.")
        with c2:
            if st.button("🚫 Pasifleştir"):
                deactivate_sales_rep(sess, rep.id)
                invalidate_caches()
                st.success(f"{rep.name} pasifleştirildi.")


def render_lead_entry() -> None:
    """Manual lead entry plus the lead table."""
    st.write("### Lead Girişi")
    reps = load_rep_names()
    with get_session() as sess:
        with st.form("lead_form", clear_on_submit=True):
            c1, c2 = st.columns(2)
            with c1:
                customer = st.text_input("Müşteri Adı Soyadı")
                req_date = st.date_input("Talep Geliş Tarihi", value=date.today())
                lead_type = st.selectbox("Lead Tipi", list(LEAD_TYPES))
                personnel = st.selectbox("Atanan Personel", [""] + reps)
            with c2:
                source = st.text_input("İlk Müşteri Kaynağı", placeholder="Instagram, Facebook, Referans ...")
                project = st.text_input("Proje Adı", value="Model Sanayi Merkezi")
                status = st.text_input("Son Görüşme Sonucu", value="Tanımsız")
                customer_id = st.text_input("Müşteri ID")
            note = st.text_area("WebForm Notu", height=80)
            create = st.form_submit_button("➕ Lead ekle")
            if create:
                if not customer.strip():
                    st.error("Müşteri adı zorunludur.")
                else:
                    try:
                        lead = create_lead(sess, {
                            "customer_name": customer.strip(),
                            "request_date": req_date.isoformat(),
                            "lead_type": lead_type,
                            "assigned_personnel": personnel,
                            "first_customer_source": source or None,
                            "project_name": project or None,
                            "status": status or "Tanımsız",
                            "last_meeting_result": status or None,
                            "customer_id": customer_id or None,
                            "web_form_note": note or None,
                        })
                        invalidate_caches()
                        st.success(f"Lead #{lead.id} kaydedildi ({lead.lead_type}, {lead.project_name}).")
                    except LeadValidationError as e:
                        st.error(f"Lead kaydedilemedi: {e}")

    df = load_leads_frame()
    st.write(f"#### Kayıtlı leadler ({len(df)})")
    st.dataframe(df, use_container_width=True, hide_index=True)

    if len(df):
        with st.expander("Lead sil", expanded=False):
            lead_id = st.selectbox("Lead", list(df["id"]),
                                   format_func=lambda i: f"{i} – {df.loc[df['id'] == i, 'customer_name'].iloc[0]}")
            if st.button("🗑️ Sil"):
                with get_session() as sess:
                    if delete_lead(sess, int(lead_id)):
                        invalidate_caches()
                        st.success("Lead silindi.")
                    else:
                        st.error("Lead bulunamadı.")
