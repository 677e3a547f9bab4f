"""
Streamlit UI for the sign-shop quote tool.

Features:
- Document tab: customer, install job, line items, live totals, print preview
- Pipeline tab: new quote, JSON import/export, value by status, status edits
- Settings tab: price book editor
"""
import logging
from dataclasses import replace
from datetime import date

import pandas as pd
import streamlit as st

from quote_tool.config.settings import get_settings
from quote_tool.engine import PricingEngine
from quote_tool.engine.models import (
    DISCOUNT_MODES,
    KINDS,
    STATUSES,
    UNIT_TYPES,
    InvalidDocumentError,
    as_count,
)
from quote_tool.formatting import describe_item, money
from quote_tool.reports.pipeline import documents_frame, pipeline_by_status, pipeline_stats
from quote_tool.services.document_service import DocumentService, DocumentStoreError
from quote_tool.services.numbering import DocumentNumberer
from quote_tool.services.price_book_service import PriceBookService


st.set_page_config(
    page_title="Quote & Invoice",
    layout="wide",
    initial_sidebar_state="collapsed"
)


@st.cache_resource
def get_services():
    """Get cached service instances."""
    settings = get_settings()
    logging.basicConfig(level=getattr(logging, settings.log_level, logging.INFO))
    price_books = PriceBookService(settings.price_book_file)
    numberer = DocumentNumberer(settings.counters_file)
    documents = DocumentService(settings.documents_file, numberer, price_books.load)
    return price_books, documents


try:
    price_books, documents = get_services()
    price_book = price_books.load()
except Exception as e:
    st.error(f"System Error: {e}")
    st.stop()

engine = PricingEngine(price_book)

if 'doc' not in st.session_state:
    st.session_state.doc = documents.demo_quote()

doc = st.session_state.doc


def set_doc(new_doc):
    st.session_state.doc = new_doc


st.title("Quote • Invoice • Install Tracker")

tab1, tab2, tab3 = st.tabs(["📄 Document", "📊 Pipeline", "⚙️ Settings"])


# ============================================================================
# TAB 1: DOCUMENT
# ============================================================================
with tab1:
    col1, col2 = st.columns([1.6, 1.4], gap="large")

    with col1:
        with st.container(border=True):
            st.subheader("Document")
            c1, c2, c3 = st.columns(3)
            kind = c1.selectbox("Type", KINDS, index=KINDS.index(doc.kind) if doc.kind in KINDS else 0)
            c2.text_input("Number", value=doc.number, disabled=True)
            status = c3.selectbox(
                "Status", STATUSES,
                index=STATUSES.index(doc.status) if doc.status in STATUSES else 0,
            )
            doc = replace(doc, kind=kind, status=status)

        with st.container(border=True):
            st.subheader("Customer")
            name = st.text_input("Name", value=doc.customer.name)
            email = st.text_input("Email", value=doc.customer.email)
            phone = st.text_input("Phone", value=doc.customer.phone)
            billing = st.text_area("Billing address", value=doc.customer.billing_address, height=68)
            doc = replace(doc, customer=replace(
                doc.customer, name=name, email=email, phone=phone, billing_address=billing,
            ))

        with st.container(border=True):
            st.subheader("Installation")
            site = st.text_input("Site address", value=doc.job.site_address)
            c1, c2 = st.columns(2)
            try:
                default_date = date.fromisoformat(doc.job.install_date)
            except ValueError:
                default_date = date.today()
            install_date = c1.date_input("Install date", value=default_date)
            crew = c2.text_input("Crew (comma separated)", value=", ".join(doc.job.crew))
            c1, c2, c3 = st.columns(3)
            hours = c1.number_input("Hours", min_value=0.0, value=float(doc.job.hours), step=0.5)
            rate = c2.number_input("Hourly rate", min_value=0.0, value=float(doc.job.hourly_rate), step=5.0)
            tax_install = c3.checkbox("Tax installation", value=doc.job.tax_install)
            doc = replace(doc, job=replace(
                doc.job,
                site_address=site,
                install_date=install_date.isoformat(),
                crew=tuple(c.strip() for c in crew.split(",") if c.strip()),
                hours=hours,
                hourly_rate=rate,
                tax_install=tax_install,
            ))

        with st.container(border=True):
            st.subheader("Line items")
            for item in doc.items:
                with st.expander(f"{item.label or item.type} — {money(engine.item_subtotal(item))}"):
                    c1, c2 = st.columns(2)
                    label = c1.text_input("Label", value=item.label, key=f"label_{item.id}")
                    unit_type = c2.selectbox(
                        "Pricing", UNIT_TYPES,
                        index=UNIT_TYPES.index(item.unit_type) if item.unit_type in UNIT_TYPES else 0,
                        key=f"ut_{item.id}",
                    )
                    types = price_book.item_types(unit_type) or [item.type]
                    item_type = st.selectbox(
                        "Type", types,
                        index=types.index(item.type) if item.type in types else 0,
                        key=f"type_{item.id}",
                    )
                    c1, c2, c3, c4 = st.columns(4)
                    width = c1.number_input("Width ft", min_value=0.0, value=float(item.width_ft), key=f"w_{item.id}")
                    height = c2.number_input("Height ft", min_value=0.0, value=float(item.height_ft), key=f"h_{item.id}")
                    qty = c3.number_input("Qty", min_value=0.0, value=float(item.qty), step=1.0, format="%g", key=f"q_{item.id}")
                    grommets = c4.number_input("Grommets", min_value=0.0, value=float(item.grommets), step=1.0, format="%g", key=f"g_{item.id}")
                    c1, c2, c3 = st.columns(3)
                    double_sided = c1.checkbox("Double sided", value=item.double_sided, key=f"ds_{item.id}")
                    lamination = c2.checkbox("Lamination", value=item.lamination, key=f"lam_{item.id}")
                    doc = documents.update_item(
                        doc, item.id,
                        label=label, unit_type=unit_type, type=item_type,
                        width_ft=width, height_ft=height, qty=as_count(qty), grommets=as_count(grommets),
                        double_sided=double_sided, lamination=lamination,
                    )
                    if c3.button("🗑️ Remove", key=f"rm_{item.id}"):
                        set_doc(documents.remove_item(doc, item.id))
                        st.rerun()

            if st.button("➕ Add item"):
                set_doc(documents.add_item(doc))
                st.rerun()

        with st.container(border=True):
            st.subheader("Terms & pricing")
            terms = st.text_area("Terms", value=doc.terms, height=68)
            notes = st.text_area("Notes", value=doc.notes, height=68)
            c1, c2, c3 = st.columns(3)
            tax_rate = c1.number_input("Tax rate", min_value=0.0, value=float(doc.tax_rate), step=0.01, format="%.3f")
            discount_mode = c2.selectbox(
                "Discount mode", DISCOUNT_MODES,
                index=DISCOUNT_MODES.index(doc.discount_mode) if doc.discount_mode in DISCOUNT_MODES else 0,
            )
            discount = c3.number_input("Discount", min_value=0.0, value=float(doc.discount), step=1.0)
            doc = replace(doc, terms=terms, notes=notes, tax_rate=tax_rate,
                          discount_mode=discount_mode, discount=discount)

    set_doc(doc)
    totals = engine.totals(doc)

    with col2:
        st.subheader("Summary")
        with st.container(border=True):
            m1, m2 = st.columns(2)
            m1.metric("Total", money(totals.total))
            m2.metric("Items", len(doc.items))
            st.caption(f"Items: {money(totals.items_subtotal)} · Installation: {money(totals.install_total)}")
            st.caption(f"Discount: -{money(totals.discount)} · Tax: {money(totals.tax)}")

            btn1, btn2 = st.columns(2)
            if btn1.button("💾 Save", type="primary", use_container_width=True):
                set_doc(documents.save(doc))
                st.toast(f"{doc.kind} saved: {doc.number}")
            if btn2.button("Convert → Invoice", use_container_width=True):
                set_doc(documents.convert_to_invoice(doc))
                st.rerun()
            st.download_button(
                "📥 Export JSON",
                data=documents.export_document(doc),
                file_name=f"{doc.number or doc.id}.json",
                mime="application/json",
                use_container_width=True,
            )

        with st.container(border=True):
            st.markdown(f"### {doc.kind} {doc.number}")
            st.markdown(f"**Bill to:** {doc.customer.name}  \n{doc.customer.billing_address}")
            st.markdown(
                f"**Installation:** {doc.job.site_address}  \n"
                f"Date: {doc.job.install_date} • Crew: {', '.join(doc.job.crew)}  \n"
                f"Hours: {doc.job.hours:g} @ {money(doc.job.hourly_rate)}"
            )
            preview = pd.DataFrame([{
                'Item': item.label,
                'Details': describe_item(item),
                'Qty': item.qty,
                'Amount': money(engine.item_subtotal(item)),
            } for item in doc.items])
            st.dataframe(preview, use_container_width=True, hide_index=True)
            st.markdown(
                f"Items {money(totals.items_subtotal)}  \n"
                f"Installation {money(totals.install_total)}  \n"
                f"Discount -{money(totals.discount)}  \n"
                f"Tax {money(totals.tax)}  \n"
                f"**Total {money(totals.total)}**"
            )
            st.caption(f"Terms: {doc.terms}")

        with st.expander("📊 View Detailed Pricing Breakdown"):
            result = engine.calculate(doc)
            for warning in result.warnings:
                st.warning(warning)
            for line in result.lines:
                st.caption(f"**{line.label}**")
                st.text(line.get_trace_text())
            st.text(result.get_trace_text())


# ============================================================================
# TAB 2: PIPELINE
# ============================================================================
with tab2:
    saved = documents.list_documents()

    with st.container(border=True):
        st.subheader("Quick Actions")
        c1, c2, c3 = st.columns(3)
        if c1.button("+ New Quote", type="primary"):
            set_doc(documents.new_quote())
            st.rerun()

        uploaded = c2.file_uploader("Import JSON", type=["json"], label_visibility="collapsed")
        if uploaded is not None and st.session_state.get('imported') != uploaded.name:
            try:
                imported = documents.import_json(uploaded.getvalue().decode("utf-8"))
                st.session_state.imported = uploaded.name
                st.success(f"Imported {imported.kind} {imported.number}")
                st.rerun()
            except InvalidDocumentError as e:
                st.error(str(e))

        try:
            c3.download_button(
                "📥 Export Pipeline JSON",
                data=documents.export_json(),
                file_name="pipeline.json",
                mime="application/json",
            )
        except DocumentStoreError as e:
            c3.caption(str(e))

    with st.container(border=True):
        st.subheader("Value by Status")
        stats = pipeline_stats(saved, price_book)
        for row in stats.itertuples():
            c1, c2, c3 = st.columns([1, 4, 1])
            c1.write(row.status)
            c2.progress(row.pct / 100)
            c3.write(money(row.value))

    with st.container(border=True):
        st.subheader("Documents")
        groups = pipeline_by_status(saved)
        for status_name, docs in groups.items():
            if not docs:
                continue
            st.markdown(f"**{status_name}** ({len(docs)})")
            for d in docs:
                c1, c2, c3, c4 = st.columns([2, 2, 1, 2])
                c1.write(d.number)
                c2.write(d.customer.name)
                c3.write(money(engine.totals(d).total))
                new_status = c4.selectbox(
                    "Status", STATUSES, index=STATUSES.index(d.status),
                    key=f"status_{d.id}", label_visibility="collapsed",
                )
                if new_status != d.status:
                    documents.set_status(d.id, new_status)
                    st.rerun()
                if c1.button("Open", key=f"open_{d.id}"):
                    set_doc(d)
                    st.rerun()

        if saved:
            st.download_button(
                "📥 CSV",
                data=documents_frame(saved, price_book).to_csv(index=False),
                file_name="pipeline.csv",
                mime="text/csv",
            )


# ============================================================================
# TAB 3: SETTINGS
# ============================================================================
with tab3:
    st.subheader("Price Book")
    c1, c2 = st.columns(2)

    with c1:
        with st.container(border=True):
            st.markdown("##### Per square foot")
            for name, value in price_book.sqft.items():
                new_value = st.number_input(name, min_value=0.0, value=float(value), key=f"sqft_{name}")
                if new_value != value:
                    price_books.set_sqft_rate(name, new_value)
                    st.rerun()

        with st.container(border=True):
            st.markdown("##### Per unit")
            for name, value in price_book.unit.items():
                new_value = st.number_input(name, min_value=0.0, value=float(value), key=f"unit_{name}")
                if new_value != value:
                    price_books.set_unit_price(name, new_value)
                    st.rerun()

    with c2:
        with st.container(border=True):
            st.markdown("##### Options")
            for name, value in price_book.options.items():
                new_value = st.number_input(name, min_value=0.0, value=float(value), key=f"opt_{name}")
                if new_value != value:
                    price_books.set_option(name, new_value)
                    st.rerun()

        with st.container(border=True):
            st.markdown("##### Installation")
            hourly = st.number_input("Hourly rate", min_value=0.0, value=price_book.hourly_rate)
            min_hours = st.number_input("Crew minimum hours", min_value=0.0, value=price_book.crew_min_hours)
            if hourly != price_book.hourly_rate or min_hours != price_book.crew_min_hours:
                price_books.set_install(hourly_rate=hourly, crew_min_hours=min_hours)
                st.rerun()

        with st.container(border=True):
            st.markdown("##### Document defaults")
            tax = st.number_input("Default tax rate", min_value=0.0, value=price_book.tax_rate, step=0.01, format="%.3f")
            mode = st.selectbox("Default discount mode", DISCOUNT_MODES,
                                index=DISCOUNT_MODES.index(price_book.discount_mode))
            if tax != price_book.tax_rate or mode != price_book.discount_mode:
                price_books.set_document_defaults(tax_rate=tax, discount_mode=mode)
                st.rerun()

        if st.button("Reset to defaults"):
            price_books.reset()
            st.rerun()
