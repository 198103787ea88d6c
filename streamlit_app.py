"""
Palette Dither — Studio

Run with:
    streamlit run streamlit_app.py
"""

from __future__ import annotations

import io

import numpy as np
import streamlit as st
from PIL import Image, ImageDraw

from palette_dither.color_utils import to_linear
from palette_dither.config import DitherConfig
from palette_dither.errors import DitherError
from palette_dither.image_io import compute_target_size, palette_swatch, to_uint8
from palette_dither.kernels import Formula
from palette_dither.palette import Palette, palette_from_hex
from palette_dither.pipeline import dither_array

# -- Page config -------------------------------------------------------
st.set_page_config(
    page_title="Palette Dither",
    page_icon=None,
    layout="wide",
    initial_sidebar_state="collapsed",
)

_DEFAULTS = DitherConfig()
_UPLOAD_TYPES = ["jpg", "jpeg", "png", "webp", "bmp", "jfif", "gif"]
_DEFAULT_HEX = "#000000,#FFFFFF,#FF0000,#00FF00,#0000FF,#FFFF00"

# -- CSS ---------------------------------------------------------------
st.markdown("""
<style>
    .stApp {
        background-color: #faf9f6;
        color: #2a2a2a;
        font-family: 'Inter', 'Helvetica Neue', sans-serif;
    }
    .block-container {
        max-width: 1000px;
        padding-top: 3.5rem;
        padding-bottom: 4rem;
    }
    .studio-title {
        font-family: 'Georgia', serif;
        font-size: 2.6rem;
        font-weight: 300;
        text-align: center;
        border-bottom: 1px solid #1a1a1a;
        padding-bottom: 0.6rem;
        margin-bottom: 0.5rem;
    }
    .studio-subtitle {
        font-size: 0.75rem;
        font-weight: 300;
        line-height: 1.8;
        margin-bottom: 2.5rem;
    }
    .label-detail {
        font-family: 'Georgia', serif;
        font-size: 0.85rem;
        font-style: italic;
        color: #a0a09a;
        text-align: center;
        margin-bottom: 0.8rem;
    }
    .stButton > button, .stDownloadButton > button {
        border-radius: 0px !important;
        letter-spacing: 0.10em;
        text-transform: uppercase;
        font-size: 0.6rem;
    }
    #MainMenu {visibility: hidden;}
    footer {visibility: hidden;}
</style>
""", unsafe_allow_html=True)


# -- Helpers -----------------------------------------------------------

def _add_passepartout(img: Image.Image, border: int = 20) -> Image.Image:
    w, h = img.size
    bg = (250, 249, 246)
    canvas = Image.new("RGB", (w + border * 2, h + border * 2), bg)
    canvas.paste(img, (border, border))
    draw = ImageDraw.Draw(canvas)
    draw.rectangle(
        [border - 1, border - 1, border + w, border + h],
        outline=(224, 222, 216), width=1,
    )
    return canvas


def _open_rgb(data: bytes) -> Image.Image:
    return Image.open(io.BytesIO(data)).convert("RGB")


def _to_float(img: Image.Image) -> np.ndarray:
    return np.asarray(img, dtype=np.float64) / 255.0


def _panel(array: np.ndarray, size: tuple[int, int]) -> Image.Image:
    return Image.fromarray(to_uint8(array)).resize(size, Image.NEAREST)


# -- Title -------------------------------------------------------------
st.markdown('<div class="studio-title">Palette Dither</div>', unsafe_allow_html=True)
st.markdown(
    '<div class="studio-subtitle">'
    "Upload an image and a palette image. Every pixel of the result is one "
    "of the colours found in the palette; the error left by each choice is "
    "spread onto neighbouring pixels in linear light so the overall tone "
    "survives the restricted colour set."
    "</div>",
    unsafe_allow_html=True,
)

# -- Controls ----------------------------------------------------------
ctrl1, ctrl2, ctrl3 = st.columns(3)
with ctrl1:
    formula = st.selectbox(
        "Formula",
        list(Formula),
        index=list(Formula).index(_DEFAULTS.formula),
        format_func=lambda f: f.value,
    )
    multipass = st.checkbox("Multipass (Interlace → Atkinson → Floyd-Steinberg)")
with ctrl2:
    strength = st.slider("Strength", 0.0, 1.5, _DEFAULTS.strength, step=0.05)
with ctrl3:
    max_side = st.slider("Max side (px)", 16, 512, 128)
    upscale = st.slider("Upscale", 1, 12, 4)

st.markdown("---")

# -- Uploads -----------------------------------------------------------
up1, up2 = st.columns(2)
with up1:
    uploaded = st.file_uploader("Source image", type=_UPLOAD_TYPES)
with up2:
    uploaded_palette = st.file_uploader("Palette image", type=_UPLOAD_TYPES)
    hex_colors = st.text_input("…or hex colours", _DEFAULT_HEX)

# Persist uploads so control changes don't clear them
for key, value in (("source_data", uploaded), ("palette_data", uploaded_palette)):
    if value is not None:
        st.session_state[key] = value.getvalue()
    elif key not in st.session_state:
        st.session_state[key] = None

if st.session_state.source_data is not None:
    original = _open_rgb(st.session_state.source_data)
    w, h = original.width, original.height
    if max(w, h) > max_side:
        w, h = compute_target_size(w, h, max_side)
    source = _to_float(original.resize((w, h), Image.LANCZOS))
    display_size = (w * upscale, h * upscale)

    try:
        if st.session_state.palette_data is not None:
            reference = to_linear(_to_float(_open_rgb(st.session_state.palette_data)))
            palette = Palette.from_buffer(reference)
        else:
            palette = palette_from_hex([c for c in hex_colors.split(",") if c.strip()])
        cfg = DitherConfig(strength=strength, formula=formula, multipass=multipass)
    except DitherError as exc:
        st.error(str(exc))
        st.stop()

    if len(palette) > 4096:
        st.warning(
            f"The palette has {len(palette):,} colours; dithering will be slow. "
            "Palette images usually hold a few dozen colours at most."
        )

    if st.button("DITHER", type="primary", use_container_width=True):
        with st.spinner("Dithering ..."):
            try:
                result = dither_array(source, palette, cfg)
            except DitherError as exc:
                st.error(str(exc))
                st.stop()

        st.markdown("---")

        dithered_display = _panel(result.dithered, display_size)
        st.image(_add_passepartout(dithered_display, border=28), use_container_width=True)

        buf = io.BytesIO()
        dithered_display.save(buf, format="PNG")
        _, dl_col, _ = st.columns([1, 2, 1])
        with dl_col:
            st.download_button(
                "SAVE IMAGE",
                data=buf.getvalue(),
                file_name="dithered.png",
                mime="image/png",
                use_container_width=True,
            )

        m1, m2, m3, m4 = st.columns(4)
        m1.metric("Colours", f"{len(palette):,}")
        m2.metric("Time", f"{result.elapsed:.1f} s")
        m3.metric("Tone Error", f"{result.tone_error:.4f}")
        m4.metric("PSNR", f"{result.psnr:.1f} dB")

        doc1, doc2, doc3 = st.columns(3)
        for col, image, label in (
            (doc1, result.source, f"Source {w} &times; {h}"),
            (doc2, palette_swatch(palette), f"Palette, {len(palette)} colours"),
            (doc3, result.nearest, "Nearest colour, no diffusion"),
        ):
            with col:
                st.image(_add_passepartout(_panel(image, display_size), border=12),
                         use_container_width=True)
                st.markdown(f'<div class="label-detail">{label}</div>',
                            unsafe_allow_html=True)

    else:
        prev1, prev2 = st.columns(2)
        with prev1:
            st.image(_panel(source, display_size), use_container_width=True)
            st.markdown('<div class="label-detail">Source</div>', unsafe_allow_html=True)
        with prev2:
            st.image(_panel(palette_swatch(palette), display_size), use_container_width=True)
            st.markdown(
                f'<div class="label-detail">Palette, {len(palette)} colours</div>',
                unsafe_allow_html=True,
            )

else:
    st.markdown(
        '<p style="font-family: Georgia, serif; color: #bbb; font-size: 1rem; '
        'font-style: italic; margin-top: 2rem;">'
        "Select a source image to begin.</p>",
        unsafe_allow_html=True,
    )
