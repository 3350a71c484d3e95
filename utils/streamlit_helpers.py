import streamlit as st
from typing import Optional, Dict, Any, List
from config.app_config import get_config
from services.auth_service.models import parse_timestamp
from services.result import Result


def format_currency(amount: Optional[float], symbol: Optional[str] = None) -> str:
    """Format a price for display, e.g. $1,999.99"""
    if symbol is None:
        symbol = get_config().ui.currency_symbol
    value = amount or 0
    sign = "-" if value < 0 else ""
    return f"{sign}{symbol}{abs(value):,.2f}"


def format_date(value: Optional[str], date_format: Optional[str] = None) -> str:
    """Format an ISO timestamp for display; unreadable values yield an empty string"""
    if not value:
        return ""
    if date_format is None:
        date_format = get_config().ui.date_format
    try:
        return parse_timestamp(value).strftime(date_format)
    except (AttributeError, TypeError, ValueError):
        return ""


def truncate(text: Optional[str], limit: int = 120) -> str:
    if not text:
        return ""
    return text if len(text) <= limit else text[:limit - 1].rstrip() + "…"


def show_result(result: Result, success_message: Optional[str] = None) -> bool:
    """Render a Result as a success or error message and return its outcome"""
    if result:
        if success_message or result.message:
            st.success(f"✅ {success_message or result.message}")
        return True

    st.error(f"❌ {result.error}")
    for extra_error in result.extra.get("errors", [])[1:]:
        st.caption(extra_error)
    return False


def render_stats(stats) -> None:
    """Render product statistics as a row of metrics"""
    col1, col2, col3 = st.columns(3)

    with col1:
        st.metric("📦 Products", stats.total_products)

    with col2:
        st.metric("💰 Inventory value", format_currency(stats.total_value))

    with col3:
        st.metric("🏷️ Average price", format_currency(stats.average_price))

    if stats.categories:
        st.caption(" · ".join(f"{name}: {count}" for name, count in sorted(stats.categories.items())))


def render_product_card(product, on_edit=None, on_delete=None) -> None:
    """Render one product with optional edit and delete buttons"""
    with st.container(border=True):
        header, price = st.columns([3, 1])

        with header:
            st.markdown(f"**{product.name}**")
            st.caption(f"🏷️ {product.category or 'General'}"
                       + (f" · SKU {product.sku}" if product.sku else "")
                       + f" · Added {format_date(product.created_at)}")

        with price:
            st.markdown(f"### {format_currency(product.price)}")

        if product.image_url:
            st.image(product.image_url, width=160)

        if product.description:
            st.write(truncate(product.description, 240))

        st.caption(f"In stock: {product.stock}")

        if on_edit or on_delete:
            col1, col2, _ = st.columns([1, 1, 4])
            with col1:
                if on_edit and st.button("✏️ Edit", key=f"edit_{product.id}", use_container_width=True):
                    on_edit(product)
            with col2:
                if on_delete and st.button("🗑️ Delete", key=f"delete_{product.id}", use_container_width=True):
                    on_delete(product)


def product_form(form_key: str, product=None, categories: Optional[List[str]] = None) -> Optional[Dict[str, Any]]:
    """
    Render the create/edit product form

    Args:
        form_key: Unique Streamlit form key
        product: Product being edited, or None for a new product
        categories: Category choices (from UI config when omitted)

    Returns:
        Submitted field values, or None when the form was not submitted
    """
    categories = list(categories or get_config().ui.categories)
    current_category = product.category if product else categories[0]
    if current_category not in categories:
        categories.append(current_category)

    with st.form(form_key, clear_on_submit=product is None):
        name = st.text_input("Name", value=product.name if product else "", max_chars=100)
        description = st.text_area("Description", value=product.description if product else "", max_chars=500)

        col1, col2 = st.columns(2)
        with col1:
            price = st.number_input("Price", min_value=0.0, step=0.01, format="%.2f",
                                    value=float(product.price) if product else 0.0)
            stock = st.number_input("Stock", min_value=0, step=1, value=int(product.stock) if product else 0)
        with col2:
            category = st.selectbox("Category", categories, index=categories.index(current_category))
            sku = st.text_input("SKU", value=product.sku if product else "")

        image_url = st.text_input("Image URL", value=product.image_url if product else "")

        submitted = st.form_submit_button("💾 Save product" if product else "➕ Add product", type="primary")

    if not submitted:
        return None

    return {
        "name": name,
        "description": description,
        # number_input returns binary floats; keep two decimals for validation
        "price": round(price, 2),
        "stock": int(stock),
        "category": category,
        "sku": sku,
        "image_url": image_url,
    }
