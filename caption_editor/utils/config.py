"""
Default configuration tree for editing sessions.

Every tunable lives here so that sessions, the factory and the exporter
agree on canvas size, palette and text defaults.
"""

from easydict import EasyDict as edict

PLACEHOLDER_IMAGE_URL = "https://via.placeholder.com/400?text=No+Image"

def get_default_cfg() -> edict:
    cfg = edict()

    cfg.CANVAS = edict()
    cfg.CANVAS.WIDTH = 800
    cfg.CANVAS.HEIGHT = 600
    cfg.CANVAS.BACKGROUND = "#f0f0f0"

    cfg.IMAGE = edict()
    # fraction of the largest aspect-preserving fit
    cfg.IMAGE.FIT_RATIO = 0.9
    cfg.IMAGE.PLACEHOLDER_URL = PLACEHOLDER_IMAGE_URL
    cfg.IMAGE.CROSS_ORIGIN = "anonymous"
    cfg.IMAGE.LOAD_TIMEOUT = None

    cfg.CAPTION = edict()
    cfg.CAPTION.BOX_WIDTH = 300
    cfg.CAPTION.FONT_FAMILY = "Arial"
    cfg.CAPTION.FONT_SIZE = 30
    cfg.CAPTION.MIN_FONT_SIZE = 10
    cfg.CAPTION.MAX_FONT_SIZE = 100
    cfg.CAPTION.FILL = "#ffffff"
    cfg.CAPTION.STROKE = "#000000"
    cfg.CAPTION.STROKE_WIDTH = 1
    cfg.CAPTION.TEXT_ALIGN = "center"
    cfg.CAPTION.PADDING = 10
    cfg.CAPTION.LINE_HEIGHT = 1.16

    cfg.EMOJI = edict()
    cfg.EMOJI.FONT_SIZE = 50

    cfg.SHAPE = edict()
    cfg.SHAPE.STROKE_WIDTH = 2

    cfg.EXPORT = edict()
    cfg.EXPORT.FILENAME = "edited-image.png"

    return cfg
