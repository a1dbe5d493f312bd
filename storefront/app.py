# storefront/app.py
# Run with:  streamlit run storefront/app.py
import logging

import streamlit as st
import streamlit.components.v1 as components

from storefront.api import ApiClient
from storefront.board import ProductBoard
from storefront.catalog import SortKey, CatalogView, facet_values
from storefront.chat import default_widget
from storefront.config import (
    ALL_CATEGORIES, ALL_REGIONS, BACKEND_URL, PRICE_MAX, PRICE_MIN, SESSION_FILE, configure_logging,
)
from storefront.errors import AuthenticationRequired, StorefrontError, ValidationError
from storefront.fetcher import CollectionFetcher
from storefront.forms import FormController, credentials_form, login_form, profile_form, register_form
from storefront.media import prepare_image
from storefront.session import FileSessionStore, SessionRepository

configure_logging()
logger = logging.getLogger("storefront.app")

# -------------------------
# Page config & styling
# -------------------------
st.set_page_config(page_title="Hrayfi", layout="wide", page_icon="🏺")

css_and_fonts = """
<link href="https://fonts.googleapis.com/css2?family=Playfair+Display:wght@600;700&family=Inter:wght@300;400;600&display=swap" rel="stylesheet">
<style>
:root{ --bg:#faf6f0; --card:#fff; --accent:#b07a45; --muted:#6f6259; --text:#222; }
html, body, [class*="css"] { background: linear-gradient(180deg, var(--bg), #fff); color:var(--text);
  font-family: "Inter", system-ui, -apple-system, "Segoe UI", Roboto, Arial; }
.hero { padding: 18px 0; margin-top:8px; font-family: "Playfair Display", Georgia, serif; }
.muted { color:var(--muted); }
.stButton>button { border-radius:10px; }
</style>
"""
components.html(css_and_fonts, height=10)

PAGES = ["Catalog", "Product", "Artisan", "Login", "Register", "Dashboard"]

# -------------------------
# Session init
# -------------------------
if "api" not in st.session_state:
    st.session_state["api"] = ApiClient(SessionRepository(FileSessionStore(SESSION_FILE)), base_url=BACKEND_URL)
if "page" not in st.session_state:
    st.session_state["page"] = "Catalog"
if "catalog" not in st.session_state:
    api0 = st.session_state["api"]
    st.session_state["catalog"] = CollectionFetcher(api0.list_products, name="products")
    st.session_state["catalog_view"] = CatalogView()
    st.session_state["catalog"].refresh()
if "chat" not in st.session_state:
    st.session_state["chat"] = default_widget()

api: ApiClient = st.session_state["api"]


def go(page: str, **state):
    st.session_state.update(state)
    st.session_state["page"] = page
    st.rerun()


def show_form_errors(form: FormController):
    if form.error is None:
        return
    if isinstance(form.error, ValidationError):
        for field, message in form.error.errors.items():
            st.error(f"{field.replace('_', ' ').capitalize()}: {message}")
    else:
        st.error(str(form.error))


def read_upload(uploaded):
    """Streamlit upload -> (filename, bytes, mime) or None."""
    if uploaded is None:
        return None
    return prepare_image(uploaded.getvalue(), uploaded.name)


def filter_bar(view: CatalogView, products, key: str):
    c = view.criteria
    cols = st.columns([3, 2, 2, 2])
    search = cols[0].text_input("Search products...", value=c.search, key=f"{key}_search")
    categories = [ALL_CATEGORIES] + facet_values(products, "category")
    regions = [ALL_REGIONS] + facet_values(products, "region")
    category = cols[1].selectbox(
        "Category", categories, index=categories.index(c.category) if c.category in categories else 0,
        format_func=lambda v: "All Categories" if v == ALL_CATEGORIES else v, key=f"{key}_category",
    )
    region = cols[2].selectbox(
        "Region", regions, index=regions.index(c.region) if c.region in regions else 0,
        format_func=lambda v: "All Regions" if v == ALL_REGIONS else v, key=f"{key}_region",
    )
    sort_keys = list(SortKey)
    sort = cols[3].selectbox(
        "Sort by", sort_keys, index=sort_keys.index(c.sort), format_func=lambda s: s.label, key=f"{key}_sort",
    )
    low, high = st.slider(
        "Price range", min_value=PRICE_MIN, max_value=PRICE_MAX, step=10,
        value=c.price_range or (PRICE_MIN, PRICE_MAX), key=f"{key}_price",
    )
    price_range = None if (low, high) == (PRICE_MIN, PRICE_MAX) else (float(low), float(high))
    before = view.page
    view.update(search=search, category=category, region=region, sort=sort, price_range=price_range)
    if view.page != before:
        # the page widget keeps its own value across reruns
        st.session_state.pop(f"{key}_page", None)
    if view.criteria.active_count() and st.button(f"Clear All ({view.criteria.active_count()})", key=f"{key}_clear"):
        view.clear_filters()
        for suffix in ("search", "category", "region", "sort", "price", "page"):
            st.session_state.pop(f"{key}_{suffix}", None)
        st.rerun()


def product_grid(view: CatalogView, products, key: str):
    page = view.view(products)
    st.caption(f"Showing {page.matched} of {page.total} products")
    if page.page_count > 1:
        chosen = st.number_input("Page", min_value=1, max_value=page.page_count, value=page.page, key=f"{key}_page")
        if chosen != view.page:
            view.set_page(int(chosen))
            st.rerun()
    cols = st.columns(4)
    for i, p in enumerate(page.items):
        with cols[i % 4]:
            st.image(p.main_image or "https://placehold.co/400x300?text=No+Image", use_container_width=True)
            st.markdown(f"**{p.name}**")
            st.markdown(f"<span class='muted'>{p.category.name} • {p.artisan_name}</span>", unsafe_allow_html=True)
            st.markdown(f"${p.price:,.2f}")
            if st.button("View", key=f"{key}_view_{p.id}"):
                go("Product", product_id=p.id)
    if not page.items:
        st.info("No products match these filters." if products else "No products yet.")


# -------------------------
# Pages
# -------------------------
def catalog_page():
    st.header("Authentic Moroccan Crafts")
    fetcher: CollectionFetcher = st.session_state["catalog"]
    if st.button("Reload", key="catalog_reload"):
        fetcher.refresh()
    if fetcher.error:
        st.error(f"Could not load products: {fetcher.error}")
        return
    view = st.session_state["catalog_view"]
    filter_bar(view, fetcher.items, "catalog")
    product_grid(view, fetcher.items, "catalog")


def product_page():
    pid = st.session_state.get("product_id")
    if pid is None:
        st.info("Pick a product from the catalog.")
        return
    try:
        p = api.get_product(pid)
    except StorefrontError as e:
        st.error(f"Could not load product: {e}")
        return
    if st.button("← Back to Products"):
        go("Catalog")
    left, right = st.columns([1, 1])
    with left:
        st.image(p.main_image or "https://placehold.co/600x450?text=No+Image", use_container_width=True)
    with right:
        st.caption(f"{p.category.name} • {p.region.name}")
        st.title(p.name)
        if p.artisan:
            st.markdown(f"by **{p.artisan.name}**")
        st.markdown(f"## ${p.price:,.2f}")
        st.write(p.description)
        st.markdown(f"**Materials:** {p.materials or '—'}")
        st.markdown(f"**Dimensions:** {p.dimensions or '—'}")
        if p.cultural_significance:
            st.markdown("**Histoire & Heritage**")
            st.write(p.cultural_significance)
        if p.artisan and st.button(f"More from {p.artisan.name}"):
            go("Artisan", artisan_view_id=p.artisan.id)


def artisan_page():
    aid = st.session_state.get("artisan_view_id")
    if aid is None:
        st.info("Open an artisan from a product page.")
        return
    if st.session_state.get("artisan_fetcher_id") != aid:
        fetcher = CollectionFetcher(lambda: api.list_artisan_products(aid), name=f"artisan {aid} products")
        fetcher.refresh()
        st.session_state["artisan_fetcher"] = fetcher
        st.session_state["artisan_fetcher_id"] = aid
        st.session_state["artisan_view"] = CatalogView()
    try:
        artisan = api.get_artisan(aid)
    except StorefrontError as e:
        st.error(f"Artisan not found: {e}")
        return
    if st.button("← Back to Products"):
        go("Catalog")
    cols = st.columns([1, 3])
    if artisan.main_image:
        cols[0].image(artisan.main_image, width=160)
    cols[1].title(artisan.name)
    if artisan.region:
        cols[1].caption(artisan.region.name)
    cols[1].write(artisan.biography)
    fetcher = st.session_state["artisan_fetcher"]
    if fetcher.error:
        st.error(f"Could not load products: {fetcher.error}")
        return
    filter_bar(st.session_state["artisan_view"], fetcher.items, "artisan")
    product_grid(st.session_state["artisan_view"], fetcher.items, "artisan")


def login_page():
    st.header("Artisan Login")
    st.caption("Access your artisan dashboard to manage your products")
    form = st.session_state.get("login_form")
    if form is None:
        form = st.session_state["login_form"] = login_form(api)
    form.begin_edit()
    with st.form("login"):
        username = st.text_input("Username", value=form.draft["username"])
        password = st.text_input("Password", type="password")
        submitted = st.form_submit_button("Sign In", disabled=form.is_submitting)
    if submitted:
        form.update({"username": username, "password": password})
        if form.submit() is not None:
            st.session_state.pop("login_form", None)
            st.session_state.pop("board", None)
            go("Dashboard")
    show_form_errors(form)
    if st.button("Don't have an account? Register as artisan"):
        go("Register")


def register_page():
    st.header("Create your artisan account")
    try:
        regions = api.list_regions()
    except StorefrontError as e:
        st.error(f"Could not load regions: {e}")
        regions = []
    form = st.session_state.get("register_form")
    if form is None:
        form = st.session_state["register_form"] = register_form(api)
    draft = form.begin_edit()
    with st.form("register"):
        c1, c2 = st.columns(2)
        name = c1.text_input("Full name", value=draft["name"])
        username = c2.text_input("Username", value=draft["username"])
        email = st.text_input("Email", value=draft["email"])
        phone = st.text_input("Phone", value=draft["phone"], placeholder="+212 6 12 34 56 78")
        region = st.selectbox("Region", [None] + regions, format_func=lambda r: "-- Select Region --" if r is None else r.name)
        biography = st.text_input("Biography", value=draft["biography"], placeholder="Pottery master in Marrakech")
        image = st.file_uploader("Profile picture", type=["jpg", "jpeg", "png"])
        password = st.text_input("Password", type="password")
        confirm = st.text_input("Confirm password", type="password")
        submitted = st.form_submit_button("Create Account", disabled=form.is_submitting)
    if submitted:
        try:
            upload = read_upload(image)
        except ValidationError as e:
            st.error(str(e))
            return
        form.update({
            "name": name, "username": username, "email": email, "phone": phone,
            "region_id": region.id if region else "", "biography": biography,
            "password": password, "confirm_password": confirm, "image": upload,
        })
        if form.submit() is not None:
            st.session_state.pop("register_form", None)
            if api.session.is_authenticated:
                st.session_state["flash"] = "Registration successful! Welcome to your dashboard."
                go("Dashboard")
            st.session_state["flash"] = "Registration successful! Please login."
            go("Login")
    show_form_errors(form)


def profile_section(board: ProductBoard):
    profile = st.session_state["profile_form"]
    artisan = profile.committed
    st.subheader(artisan.name)
    st.write(artisan.biography)
    st.caption(f"📞 {artisan.phone}  ·  ✉️ {artisan.email or api.session.artisan_email or '—'}")
    c1, c2 = st.columns(2)
    if not profile.is_editing and c1.button("Edit Profile"):
        profile.begin_edit()
        st.rerun()
    if profile.is_editing:
        with st.form("profile"):
            name = st.text_input("Name", value=profile.draft["name"])
            phone = st.text_input("Phone", value=profile.draft["phone"])
            bio = st.text_area("Biography", value=profile.draft["biography"])
            save = st.form_submit_button("Save", disabled=profile.is_submitting)
            cancel = st.form_submit_button("Cancel")
        if cancel:
            profile.cancel()
            st.rerun()
        if save:
            profile.update({"name": name, "phone": phone, "biography": bio})
            if profile.submit() is not None:
                st.session_state["credentials_form"].committed = profile.committed
                st.rerun()
        show_form_errors(profile)

    creds = st.session_state["credentials_form"]
    if not creds.is_editing and c2.button("Change Login Info"):
        creds.begin_edit()
        st.rerun()
    if creds.is_editing:
        with st.form("credentials"):
            email = st.text_input("Email", value=creds.draft["email"])
            username = st.text_input("New username", value=creds.draft["username"])
            current = st.text_input("Current password", type="password")
            new = st.text_input("New password", type="password")
            confirm = st.text_input("Confirm new password", type="password")
            save = st.form_submit_button("Update Credentials", disabled=creds.is_submitting)
            cancel = st.form_submit_button("Cancel")
        if cancel:
            creds.cancel()
            st.rerun()
        if save:
            creds.update({
                "email": email, "username": username, "current_password": current,
                "new_password": new, "confirm_password": confirm,
            })
            if creds.submit() is not None:
                profile.committed = creds.committed
                st.success("Login credentials updated successfully")
        show_form_errors(creds)


def product_editor(board: ProductBoard):
    form = st.session_state.get("product_form")
    if form is None:
        return
    draft = form.begin_edit()
    try:
        categories, regions = api.list_categories(), api.list_regions()
    except StorefrontError as e:
        st.error(f"Could not load categories/regions: {e}")
        return
    cat_ids = [c.id for c in categories]
    reg_ids = [r.id for r in regions]
    cat_names = {c.id: c.name for c in categories}
    reg_names = {r.id: r.name for r in regions}
    title = "Update Product" if form.committed is not None else "Add Product"
    with st.form("product"):
        st.subheader(title)
        name = st.text_input("Name", value=draft["name"])
        price = st.text_input("Price", value=draft["price"])
        description = st.text_area("Description", value=draft["description"])
        category = st.selectbox("Category", cat_ids, format_func=cat_names.get,
                                index=cat_ids.index(draft["category_id"]) if draft["category_id"] in cat_ids else 0)
        region = st.selectbox("Region", reg_ids, format_func=reg_names.get,
                              index=reg_ids.index(draft["region_id"]) if draft["region_id"] in reg_ids else 0)
        materials = st.text_input("Materials", value=draft["materials"], placeholder="e.g., Natural wool, Vegetable dyes")
        dimensions = st.text_input("Dimensions", value=draft["dimensions"])
        significance = st.text_area("Cultural significance", value=draft["cultural_significance"])
        image = st.file_uploader("Product image", type=["jpg", "jpeg", "png"])
        save = st.form_submit_button(title, disabled=form.is_submitting)
        cancel = st.form_submit_button("Cancel")
    if cancel:
        form.cancel()
        st.session_state.pop("product_form", None)
        st.rerun()
    if save:
        try:
            upload = read_upload(image)
        except ValidationError as e:
            st.error(str(e))
            return
        form.update({
            "name": name, "price": price, "description": description, "category_id": category,
            "region_id": region, "materials": materials, "dimensions": dimensions,
            "cultural_significance": significance, "image": upload,
        })
        if form.submit() is not None:
            st.session_state.pop("product_form", None)
            st.rerun()
    show_form_errors(form)


def dashboard_page():
    try:
        artisan_id = api.session.require_artisan_id()
    except AuthenticationRequired as e:
        st.warning(str(e))
        if st.button("Go to login"):
            go("Login")
        return

    board = st.session_state.get("board")
    if board is None or board.artisan_id != artisan_id:
        board = st.session_state["board"] = ProductBoard(api, artisan_id)
        board.refresh()
        try:
            artisan = api.get_artisan(artisan_id, auth=True)
        except StorefrontError as e:
            st.session_state.pop("board", None)
            st.error(f"Could not load your profile: {e}")
            return
        st.session_state["profile_form"] = profile_form(api, artisan)
        st.session_state["credentials_form"] = credentials_form(api, artisan)

    profile_section(board)
    if board.fetcher.error:
        st.error(f"Could not load your products: {board.fetcher.error}")
        return

    filter_bar(board.view, board.products, "board")
    stats = board.summary()
    s1, s2, s3 = st.columns(3)
    s1.metric("Total Products", stats.count)
    s2.metric("Categories", stats.category_count)
    s3.metric("Avg. Price", f"${stats.average_price}")

    head = st.columns([4, 1])
    head[0].subheader("Your Products")
    if head[1].button("Add Product"):
        st.session_state["product_form"] = board.create_form()
        st.rerun()
    product_editor(board)

    visible = board.visible()
    if not visible:
        st.info("Start by adding your first artisan product to showcase your craftsmanship."
                if not board.products else "Try adjusting your filters to see more products.")
    for p in visible:
        cols = st.columns([1, 3, 1])
        cols[0].image(p.main_image or "https://placehold.co/200x150?text=No+Image", width=140)
        cols[1].markdown(f"**{p.name}** · ${p.price:,.2f}")
        cols[1].caption(f"{p.category.name} • {p.region.name}")
        cols[1].write(p.description)
        if cols[2].button("View", key=f"board_view_{p.id}"):
            go("Product", product_id=p.id)
        if cols[2].button("Edit", key=f"board_edit_{p.id}"):
            st.session_state["product_form"] = board.edit_form(p)
            st.rerun()
        confirm_key = f"confirm_delete_{p.id}"
        if cols[2].button("Delete", key=f"board_delete_{p.id}", disabled=board.is_pending(p.id)):
            st.session_state[confirm_key] = True
        if st.session_state.get(confirm_key):
            st.warning(f"Delete '{p.name}'?")
            c1, c2 = st.columns([1, 1])
            if c1.button("Yes - delete", key=f"confirm_yes_{p.id}"):
                st.session_state.pop(confirm_key, None)
                try:
                    board.delete(p.id)
                except StorefrontError as e:
                    st.error(f"Failed to delete product: {e}")
                else:
                    st.rerun()
            if c2.button("Cancel", key=f"confirm_no_{p.id}"):
                st.session_state.pop(confirm_key, None)
                st.rerun()


# -------------------------
# Sidebar: navigation, session, chat
# -------------------------
with st.sidebar:
    st.markdown("<div class='hero'><h2 style='margin:0'>Hrayfi</h2>"
                "<p class='muted'>Authentic Moroccan Crafts</p></div>", unsafe_allow_html=True)
    choice = st.radio("Navigate", PAGES, index=PAGES.index(st.session_state["page"]))
    if choice != st.session_state["page"]:
        go(choice)
    if api.session.is_authenticated:
        st.caption(f"Signed in as {api.session.artisan_email or 'artisan #%s' % api.session.artisan_id}")
        if st.button("Logout"):
            api.logout()
            for k in ("board", "profile_form", "credentials_form", "product_form"):
                st.session_state.pop(k, None)
            go("Catalog")

    with st.expander("💬 Ask about our products"):
        chat = st.session_state["chat"]
        for m in chat.messages[-12:]:
            st.markdown(f"{'🧑' if m.is_user else '🤖'} {m.text}")
        with st.form("chat_box", clear_on_submit=True):
            text = st.text_input("Message", placeholder="Ask about our products...")
            if st.form_submit_button("Send"):
                chat.send(text)
                st.rerun()

flash = st.session_state.pop("flash", None)
if flash:
    st.success(flash)

{
    "Catalog": catalog_page,
    "Product": product_page,
    "Artisan": artisan_page,
    "Login": login_page,
    "Register": register_page,
    "Dashboard": dashboard_page,
}[st.session_state["page"]]()
