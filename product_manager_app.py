import streamlit as st
from infrastructure.storage import MemoryKeyValueStore
from services.exceptions import ProductAppError
from services.service_container import ServiceContainer, build_services
from utils.logging_config import initialize_logging, get_logger, log_user_interaction, log_execution_time
from utils.streamlit_helpers import (
    format_currency,
    product_form,
    render_product_card,
    render_stats,
    show_result
)
from config.app_config import get_config

# Initialize logging and error tracking
error_tracker = initialize_logging()
logger = get_logger(__name__)

# Get configuration
config = get_config()

st.set_page_config(page_title=config.ui.app_title, page_icon="📦", layout="wide")


def get_services() -> ServiceContainer:
    """
    Services for this browser session. The signed-in session is kept in a
    store private to this browser session; users and products are shared.
    """
    if "services" not in st.session_state:
        st.session_state.services = build_services(config, session_store=MemoryKeyValueStore())
    return st.session_state.services


def render_auth_page(services: ServiceContainer):
    """Login and signup tabs"""
    st.markdown(f"<div style='text-align: center;'><h1>{config.ui.app_title}</h1>"
                f"<p>{config.ui.tagline}</p></div>", unsafe_allow_html=True)

    login_tab, signup_tab = st.tabs(["🔑 Login", "📝 Sign up"])

    with login_tab:
        with st.form("login_form"):
            email = st.text_input("📧 Email", placeholder="you@example.com")
            password = st.text_input("🔒 Password", type="password")
            remember_me = st.checkbox("Remember me for 30 days")
            login_clicked = st.form_submit_button("🔑 Sign In", type="primary", use_container_width=True)

        if login_clicked:
            with st.spinner("Authenticating..."):
                result = services.auth.login(email, password, remember_me)
            log_user_interaction(logger, "login_submitted", success=result.success)
            if show_result(result):
                st.rerun()

    with signup_tab:
        with st.form("signup_form"):
            username = st.text_input("👤 Username (optional)")
            email = st.text_input("📧 Email", key="signup_email", placeholder="you@example.com")
            password = st.text_input("🔒 Password", type="password", key="signup_password",
                                     help="At least 8 characters with upper and lower case letters, a number and a symbol")
            confirm_password = st.text_input("🔒 Confirm Password", type="password")
            signup_clicked = st.form_submit_button("📝 Create Account", type="primary", use_container_width=True)

        if signup_clicked:
            if password != confirm_password:
                st.error("❌ Passwords do not match")
            else:
                with st.spinner("Creating account..."):
                    result = services.auth.signup(email, password, username or None)
                log_user_interaction(logger, "signup_submitted", success=result.success)
                if show_result(result):
                    st.rerun()


def render_user_menu(services: ServiceContainer, user):
    """Sidebar with the signed-in user and logout"""
    with st.sidebar:
        st.subheader("👤 Account")
        st.write(f"**{user.get('username') or user.get('email')}**")
        st.caption(user.get("email", ""))

        if st.button("🚪 Logout", use_container_width=True):
            result = services.auth.logout()
            st.session_state.pop("editing_product_id", None)
            if not result:
                st.warning(f"Signed out locally: {result.error}")
            st.rerun()

        if hasattr(services.auth, "change_password"):
            with st.expander("🔑 Change password"):
                with st.form("change_password_form", clear_on_submit=True):
                    current = st.text_input("Current password", type="password")
                    new = st.text_input("New password", type="password")
                    change_clicked = st.form_submit_button("Update password")

                if change_clicked:
                    try:
                        services.auth.change_password(current, new)
                        st.success("✅ Password updated")
                    except ProductAppError as e:
                        st.error(f"❌ {e}")


def _start_edit(product):
    st.session_state.editing_product_id = product.id
    st.rerun()


def _delete(product):
    result = st.session_state.services.products.delete_product(product.id)
    if show_result(result, f"Deleted {product.name}"):
        st.session_state.pop("editing_product_id", None)
        st.rerun()


def render_dashboard(services: ServiceContainer):
    """Stats, search, product list and the product form"""
    products_service = services.products

    st.title(f"{config.ui.app_title}")

    if hasattr(products_service, "get_product_stats"):
        try:
            render_stats(products_service.get_product_stats())
        except ProductAppError as e:
            error_tracker.track_error(e, "product_stats")
            st.error(f"❌ {e}")

    list_col, form_col = st.columns([2, 1])

    with form_col:
        editing_id = st.session_state.get("editing_product_id")
        editing = products_service.get_product(editing_id) if editing_id else None

        if editing:
            st.subheader("✏️ Edit product")
            values = product_form(f"edit_form_{editing.id}", editing)
            if values is not None:
                result = products_service.update_product(editing.id, values)
                if show_result(result, f"Updated {values['name']}"):
                    st.session_state.pop("editing_product_id", None)
                    st.rerun()
            if st.button("Cancel editing"):
                st.session_state.pop("editing_product_id", None)
                st.rerun()
        else:
            st.subheader("➕ New product")
            values = product_form("create_form")
            if values is not None:
                result = products_service.create_product(values)
                if show_result(result, f"Added {values['name']} at {format_currency(values['price'])}"):
                    st.rerun()

    with list_col:
        query = st.text_input("🔍 Search products", placeholder="Name, description, category or SKU")

        try:
            with log_execution_time(logger, "load_products"):
                products = products_service.search_products(query)
        except ProductAppError as e:
            error_tracker.track_error(e, "product_list")
            st.error(f"❌ {e}")
            return

        if not products:
            st.info("No products match your search." if query else "No products yet. Add your first one!")
            return

        st.caption(f"📊 {len(products)} product{'s' if len(products) != 1 else ''}")
        for product in products:
            render_product_card(product, on_edit=_start_edit, on_delete=_delete)


def main():
    services = get_services()

    user = services.auth.get_current_user()
    if not user:
        render_auth_page(services)
        return

    render_user_menu(services, user)
    render_dashboard(services)


main()
