# tests/helpers.py
import numpy as np

from region_classifier.config import Config


class FastConfig(Config):
    N_JOBS = 1
    CV_FOLDS = 5


def clustered_dataset(per_class=20, classes=(0, 1, 2), spread=0.05, seed=0):
    """Well separated clusters, rows interleaved by class"""
    rng = np.random.default_rng(seed)
    inputs, labels = [], []
    for _ in range(per_class):
        for code in classes:
            inputs.append(np.full(13, float(code)) + rng.normal(0, spread, 13))
            labels.append(code)
    return np.array(inputs), np.array(labels)


def center(code):
    return np.full(13, float(code))


def make_sample_pdf(path):
    """One page: a large title line, a paragraph, a rule and an image"""
    import fitz

    doc = fitz.open()
    try:
        page = doc.new_page(width=612, height=792)
        page.insert_text((72, 100), "Annual Report 2024", fontsize=24)
        page.insert_text(
            (72, 200),
            "The quick brown fox jumps over the lazy dog.",
            fontsize=10,
        )
        page.draw_line((72, 300), (540, 300))

        pix = fitz.Pixmap(fitz.csRGB, fitz.IRect(0, 0, 8, 8), False)
        pix.clear_with(200)
        page.insert_image(fitz.Rect(300, 400, 400, 500), pixmap=pix)

        doc.save(str(path))
    finally:
        doc.close()
    return path
