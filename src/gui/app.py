from __future__ import annotations

# put src on the import path (once; harmless since everything imports lead_takip.*)
import os, sys
SRC_DIR = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if SRC_DIR not in sys.path:
    sys.path.insert(0, SRC_DIR)

import altair as alt
import pandas as pd
import streamlit as st
from dotenv import load_dotenv

from gui.board import render_dashboard
from gui.helpers import invalidate_caches, show_pie3d
from gui.personel import render_lead_entry, render_sales_reps
from lead_takip.charts.colors import generate_chart_colors
from lead_takip.db import DATABASE_URL, engine, get_session, init_db
from lead_takip.errors import LeadTakipError, LLMServiceError, UnsafeQueryError
from lead_takip.llm.assistant import answer_question
from lead_takip.llm.ollama import OllamaConfig, OllamaService, chart_values
from lead_takip.logs import configure_logging
from lead_takip.services.ingest import SUPPORTED_SUFFIXES, import_file
from lead_takip.services.leads import clear_leads, list_settings, load_sample_data, upsert_setting


load_dotenv()
configure_logging()
st.set_page_config(page_title="Lead Takip", page_icon="📊", layout="wide")

# create tables and default settings
init_db()

st.title("📊 Lead Takip – Gayrimenkul Satış & Kiralama")

PAGES = ["Genel Bakış", "Lead Girişi", "Dosya İçe Aktarma", "Satış Personeli", "AI Asistan", "Ayarlar"]

with st.sidebar:
    st.header("Menü")
    page = st.radio("Sayfa", PAGES)


@st.cache_resource
def _ollama() -> OllamaService:
    return OllamaService(OllamaConfig.from_env())


# ---------------- Genel Bakış ----------------
if page == "Genel Bakış":
    render_dashboard()


# ---------------- Lead Girişi ----------------
elif page == "Lead Girişi":
    render_lead_entry()


# ---------------- Dosya İçe Aktarma ----------------
elif page == "Dosya İçe Aktarma":
    st.write("### Excel / CSV / JSON içe aktarma")
    st.markdown("CRM dışa aktarımını yükleyin. Türkçe sütun başlıkları (ör. **Müşteri Adı Soyadı**, "
                "**Talep Geliş Tarihi**, **SON GORUSME SONUCU**) otomatik eşlenir.")
    up = st.file_uploader("Dosya seç", type=[s.lstrip(".") for s in SUPPORTED_SUFFIXES])

    if st.button("➡️ İçe aktar"):
        if not up:
            st.error("Lütfen bir dosya seçin.")
        else:
            with get_session() as sess:
                try:
                    report = import_file(sess, up.name, up.read())
                    invalidate_caches()
                    st.success(report.message)
                    w = report.warnings
                    c1, c2, c3, c4 = st.columns(4)
                    c1.metric("Satır", w.total_records)
                    c2.metric("İçe aktarılan", report.imported)
                    c3.metric("Tekrar (atlandı)", report.skipped)
                    c4.metric("Hatalı satır", len(report.errors))
                    if not w.date_column_present:
                        st.warning("Tarih sütunu bulunamadı (Talep Geliş Tarihi).")
                    if not w.status_column_present:
                        st.warning("Durum sütunu bulunamadı (SON GORUSME SONUCU) – durum 'Tanımsız' olarak kaydedildi.")
                    if w.date_format_issues:
                        st.warning(f"{w.date_format_issues} satırda tarih okunamadı. "
                                   f"Desteklenen formatlar: {', '.join(w.supported_date_formats)}")
                    if report.created_reps:
                        st.info("Yeni personel: " + ", ".join(report.created_reps))
                    if report.errors:
                        st.dataframe(pd.DataFrame([{"Satır": e.row, "Hata": e.message} for e in report.errors]),
                                     use_container_width=True, hide_index=True)
                except LeadTakipError as e:
                    st.error(f"Dosya işlenemedi: {e}")
                except Exception as e:
                    st.exception(e)

    st.divider()
    c1, c2 = st.columns(2)
    with c1:
        if st.button("🧪 Örnek veri yükle"):
            with get_session() as sess:
                n = load_sample_data(sess)
            invalidate_caches()
            st.success(f"{n} örnek lead yüklendi.")
    with c2:
        if st.button("🗑️ Tüm leadleri sil"):
            with get_session() as sess:
                n = clear_leads(sess)
            invalidate_caches()
            st.success(f"{n} lead silindi.")


# ---------------- Satış Personeli ----------------
elif page == "Satış Personeli":
    render_sales_reps()


# ---------------- AI Asistan ----------------
elif page == "AI Asistan":
    st.write("### AI Asistan")
    service = _ollama()
    st.caption(f"Model: `{service.config.model}` @ {service.config.base_url}")

    if st.button("🔌 Modeli kontrol et"):
        with st.spinner("Ollama kontrol ediliyor …"):
            ok = service.ensure_model_available()
        (st.success if ok else st.error)("Model hazır." if ok else "Ollama servisine ulaşılamıyor.")

    question = st.text_input("Sorunuz", placeholder="Instagram'dan gelen satış leadleri kaç tane?")
    if st.button("💬 Sor") and question.strip():
        try:
            with st.spinner("Yanıt hazırlanıyor …"):
                answer = answer_question(question.strip(), engine, service)
            st.markdown(answer.summary)
            with st.expander("SQL", expanded=False):
                st.code(answer.sql, language="sql")
            if answer.rows:
                st.dataframe(answer.frame, use_container_width=True, hide_index=True)

            spec = answer.chart_spec
            if spec:
                labels, data = chart_values(spec)
                if spec.get("type") == "pie":
                    show_pie3d(spec.get("title", ""), labels, data, spec.get("colors") or None, "pie-assistant")
                elif labels and len(labels) == len(data):
                    frame = pd.DataFrame({"label": labels, "value": data})
                    mark = alt.Chart(frame).mark_line(point=True) if spec.get("type") == "line" else alt.Chart(frame).mark_bar()
                    st.altair_chart(
                        mark.encode(
                            x=alt.X("label:N", title="", sort=None),
                            y=alt.Y("value:Q", title=""),
                            color=alt.Color("label:N", legend=None,
                                            scale=alt.Scale(domain=labels, range=generate_chart_colors(len(labels)))),
                        ).properties(title=spec.get("title", "")),
                        use_container_width=True,
                    )
        except UnsafeQueryError as e:
            st.error(f"Sorgu reddedildi: {e}")
        except LLMServiceError as e:
            st.error(f"AI servisi hatası: {e}")
        except Exception as e:
            st.exception(e)


# ---------------- Ayarlar ----------------
elif page == "Ayarlar":
    st.write("### Ayarlar")
    st.write(f"DB: `{DATABASE_URL}`")
    st.write(f"Ollama: `{os.getenv('OLLAMA_BASE_URL', 'http://localhost:11434')}`")
    st.caption("Ortam değişkenleri `.env` dosyasından okunur (DB_PATH, DATABASE_URL, OLLAMA_MODEL …).")

    with get_session() as sess:
        settings = list_settings(sess)
        with st.form("settings_form"):
            values = {k: st.text_input(k, value=v) for k, v in settings.items()}
            if st.form_submit_button("💾 Kaydet"):
                for k, v in values.items():
                    if v != settings[k]:
                        upsert_setting(sess, k, v)
                st.success("Ayarlar kaydedildi.")
