# stringloom/imaging.py
# Turning an image file into the target pixel buffer.

import numpy as np
from PIL import Image, ImageEnhance, ImageFilter


def center_crop_to_aspect(img: Image.Image, target_aspect: float) -> Image.Image:
    w, h = img.size
    src_aspect = w / h
    if src_aspect > target_aspect:
        new_w = int(round(h * target_aspect))
        x0 = (w - new_w) // 2
        return img.crop((x0, 0, x0 + new_w, h))
    else:
        new_h = int(round(w / target_aspect))
        y0 = (h - new_h) // 2
        return img.crop((0, y0, w, y0 + new_h))


def prepare_image(img: Image.Image, size, blur_radius: float = 0.0, contrast: float = 1.0) -> Image.Image:
    """
    RGBA image of exactly `size` (width, height):
    - crop to aspect (the image covers the whole frame)
    - resize
    - optional blur + contrast
    """
    width, height = size
    img = img.convert("RGBA")
    img = center_crop_to_aspect(img, width / height)
    img = img.resize((width, height), Image.LANCZOS)
    if blur_radius > 0:
        img = img.filter(ImageFilter.GaussianBlur(radius=blur_radius))
    if contrast != 1.0:
        img = ImageEnhance.Contrast(img).enhance(contrast)
    return img


def load_target(img_path: str, size, blur_radius: float = 0.0, contrast: float = 1.0) -> np.ndarray:
    """Target buffer as float64 (height, width, 4) in 0..255."""
    with Image.open(img_path) as img:
        prepared = prepare_image(img, size, blur_radius, contrast)
    return np.asarray(prepared, dtype=np.float64)


def to_image(buffer: np.ndarray) -> Image.Image:
    """RGBA image of a float buffer."""
    arr = np.clip(np.rint(buffer), 0, 255).astype(np.uint8)
    return Image.fromarray(arr)
