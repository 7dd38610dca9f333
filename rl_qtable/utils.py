import numpy as np
from PIL import Image, ImageDraw

TARGET_NAMES = ("eyes", "nose")


def load_image_grayscale(path, target_size=None):
    """Load an image as a float32 grayscale array in [0, 1], optionally resized to (W, H)."""
    return to_grayscale_array(Image.open(path), target_size)


def to_grayscale_array(img, target_size=None):
    """Convert a PIL image to a float32 grayscale array in [0, 1], optionally resized to (W, H)."""
    img = img.convert("L")
    if target_size is not None:
        img = img.resize(target_size, Image.BILINEAR)
    return np.asarray(img, dtype=np.float32) / 255.0


def synthetic_face(size=256):
    """Draw a plain cartoon face so the demo runs without an input photo."""
    img = Image.new("L", (size, size), color=30)
    draw = ImageDraw.Draw(img)
    s = size / 100.0
    draw.ellipse([10 * s, 5 * s, 90 * s, 95 * s], fill=200)
    for x0 in (25, 60):
        draw.ellipse([x0 * s, 30 * s, (x0 + 15) * s, 40 * s], fill=60)
    draw.polygon([(50 * s, 45 * s), (44 * s, 65 * s), (56 * s, 65 * s)], fill=140)
    draw.arc([30 * s, 65 * s, 70 * s, 85 * s], start=20, end=160, fill=60, width=max(1, int(2 * s)))
    return np.asarray(img, dtype=np.float32) / 255.0


def gridify(image, grid_size):
    """
    Split an image into grid_size x grid_size cells.

    Returns an int32 array of shape (grid_size, grid_size, 4) holding (y0, x0, y1, x1)
    for each cell. The last row/column absorbs any remainder pixels.
    """
    H, W = image.shape[:2]
    if grid_size < 1 or grid_size > min(H, W):
        raise ValueError(f"grid_size must be between 1 and {min(H, W)} for a {H}x{W} image, got {grid_size}.")
    cell_h = H // grid_size
    cell_w = W // grid_size
    rows = np.arange(grid_size)
    y0 = rows * cell_h
    x0 = rows * cell_w
    y1 = np.append(y0[1:], H)
    x1 = np.append(x0[1:], W)
    bounds = np.zeros((grid_size, grid_size, 4), dtype=np.int32)
    bounds[..., 0] = y0[:, None]
    bounds[..., 1] = x0[None, :]
    bounds[..., 2] = y1[:, None]
    bounds[..., 3] = x1[None, :]
    return bounds


def make_target_masks(grid_size, targets=TARGET_NAMES):
    """
    Boolean (grid_size, grid_size) masks for facial parts, from fixed face-layout heuristics:
    eyes are two blobs in the upper-middle band, the nose a central block below them.
    """
    unknown = set(targets) - set(TARGET_NAMES)
    if unknown:
        raise ValueError(f"Unknown targets {sorted(unknown)}; expected any of {TARGET_NAMES}.")
    yy, xx = np.mgrid[0:grid_size, 0:grid_size] / max(grid_size - 1, 1)

    masks = {}
    if "eyes" in targets:
        masks["eyes"] = ((yy > 0.25) & (yy < 0.45) &
                         (((xx > 0.18) & (xx < 0.42)) | ((xx > 0.58) & (xx < 0.82))))
    if "nose" in targets:
        masks["nose"] = (yy > 0.45) & (yy < 0.70) & (xx > 0.40) & (xx < 0.60)
    return masks


def target_cells(target_masks):
    """Union of all masks as a frozenset of (row, col) cells."""
    cells = frozenset((int(r), int(c)) for m in target_masks.values() for r, c in np.argwhere(m))
    if not cells:
        raise ValueError("No target cells available in masks.")
    return cells


def draw_path_on_image(image, grid_coords, path, targets=()):
    """Outline the visited cells (and, thicker, the target cells) on an RGB copy of image."""
    img = Image.fromarray((image * 255).astype(np.uint8)).convert("RGB")
    draw = ImageDraw.Draw(img)
    for (r, c) in targets:
        y0, x0, y1, x1 = grid_coords[r, c]
        draw.rectangle([x0, y0, x1, y1], outline=(255, 200, 0), width=2)
    for (r, c) in path:
        y0, x0, y1, x1 = grid_coords[r, c]
        draw.rectangle([x0, y0, x1, y1], outline=(255, 0, 0), width=1)
    return img
