# hfget/core/__init__.py
from .catalog import CatalogClient
from .config import Settings, config_path, init_cfg, load_cfg, save_cfg
from .download import CancelToken, DownloadPipeline, ProgressReporter
from .http import SESSION, open_stream, resolve_url
from .paths import make_target_dir, resolve_target_dir
from .utils import format_bytes, quant_label, weight_files

__all__ = [
    "CatalogClient",
    "Settings", "config_path", "init_cfg", "load_cfg", "save_cfg",
    "CancelToken", "DownloadPipeline", "ProgressReporter",
    "SESSION", "open_stream", "resolve_url",
    "make_target_dir", "resolve_target_dir",
    "format_bytes", "quant_label", "weight_files",
    "setup_logging",
]

# ---- simple logging toggle for the package ----
import logging

def setup_logging(verbose: bool = False) -> None:
    level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(levelname)s %(name)s: %(message)s"
    )
    # quiet down noisy deps
    for name in ("urllib3", "requests", "huggingface_hub"):
        logging.getLogger(name).setLevel(logging.WARNING)
