import hashlib

import streamlit as st
from loguru import logger

import settings
from generation import MissingCredentials, create_client
from images import InvalidImage, load_upload
from session import HeadshotSession
from styles import HEADSHOT_STYLES

EDIT_HINT = (
    'Want to change something? Try "Add a blue tie", "Make the lighting warmer", '
    'or "Change background to a park".'
)


@st.cache_resource
def get_client():
    settings.configure_logging()
    return create_client()


def get_session(client) -> HeadshotSession:
    st.session_state.setdefault("source_digest", None)
    st.session_state.setdefault("uploader_nonce", 0)
    if "headshot_session" not in st.session_state:
        logger.info("Starting new headshot session.")
        st.session_state.headshot_session = HeadshotSession(client, model=settings.MODEL_NAME)
    return st.session_state.headshot_session


def on_start_over() -> None:
    st.session_state.headshot_session.reset()
    st.session_state.source_digest = None
    # A new key gives fresh, empty upload widgets.
    st.session_state.uploader_nonce += 1
    st.session_state.edit_instruction = ""


def on_style_selected(style) -> None:
    st.session_state.headshot_session.select_preset(style)


def on_generate() -> None:
    with st.spinner("Perfecting your headshot..."):
        st.session_state.headshot_session.generate()


def on_edit() -> None:
    session = st.session_state.headshot_session
    instruction = st.session_state.get("edit_instruction", "")
    with st.spinner("Applying your edit..."):
        session.edit(instruction)
    if session.error is None and session.can_edit:
        st.session_state.edit_instruction = ""


def sync_source_image(session: HeadshotSession, image_source) -> None:
    if image_source is None:
        if st.session_state.source_digest is not None:
            st.session_state.source_digest = None
            session.clear_image()
        return

    image_bytes = image_source.getvalue()
    digest = hashlib.sha256(image_bytes).hexdigest()
    if digest == st.session_state.source_digest:
        return

    try:
        payload = load_upload(image_bytes, getattr(image_source, "type", None))
    except InvalidImage as exc:
        if session.source is not None:
            st.warning(f"{exc} Your previous photo is still in use.")
        else:
            st.warning(str(exc))
        return

    st.session_state.source_digest = digest
    session.select_image(payload)


st.set_page_config(page_title="AI Headshot Studio", page_icon="📸", layout="wide")

try:
    client = get_client()
except (MissingCredentials, settings.InvalidSetting) as exc:
    st.error(str(exc))
    st.stop()

session = get_session(client)

header_col, reset_col = st.columns([5, 1])
with header_col:
    st.title("AI Headshot Studio")
with reset_col:
    if session.result is not None:
        st.button("Start Over", key="start_over", on_click=on_start_over)

controls, result_col = st.columns([5, 7], gap="large")

with controls:
    st.subheader("1. Upload your selfie")
    nonce = st.session_state.uploader_nonce
    uploaded_file = st.file_uploader(
        "Casual selfie (PNG, JPG or WEBP)",
        type=["png", "jpg", "jpeg", "webp"],
        accept_multiple_files=False,
        key=f"uploader_{nonce}",
    )
    taken_photo = st.camera_input("Or take a picture", key=f"camera_{nonce}")
    sync_source_image(session, taken_photo if taken_photo is not None else uploaded_file)

    if session.source is not None:
        st.image(session.source.data, caption="Source photo")

    st.subheader("2. Choose a style")
    style_columns = st.columns(2)
    for index, style in enumerate(HEADSHOT_STYLES):
        selected = session.preset is not None and session.preset.id == style.id
        with style_columns[index % 2]:
            st.markdown(
                f'<div style="width:2rem;height:2rem;border-radius:0.5rem;'
                f'background:{style.swatch};border:1px solid rgba(0,0,0,0.05)"></div>',
                unsafe_allow_html=True,
            )
            st.button(
                style.name,
                key=f"style_{style.id}",
                help=style.description,
                type="primary" if selected else "secondary",
                disabled=session.source is None or session.in_progress,
                on_click=on_style_selected,
                args=(style,),
            )
            st.caption(style.description)

    st.button(
        "Generate Headshot",
        key="generate",
        type="primary",
        disabled=not session.can_generate,
        on_click=on_generate,
    )

    if session.error:
        st.error(session.error)

with result_col:
    if session.result is None:
        st.markdown("### Your AI Headshot will appear here")
        st.caption("Upload a photo and select a style to see the magic happen.")
    else:
        st.image(session.result.data, caption=f"AI Generated • {session.preset.name}")

        download = session.download()
        if download is not None:
            filename, png_bytes = download
            st.download_button(
                "Download",
                data=png_bytes,
                file_name=filename,
                mime="image/png",
                key="download",
            )

        st.markdown("#### Refine with AI")
        st.caption(EDIT_HINT)
        with st.form("refine"):
            st.text_input("Describe your edit...", key="edit_instruction")
            st.form_submit_button(
                "Apply edit",
                key="apply_edit",
                disabled=not session.can_edit,
                on_click=on_edit,
            )
