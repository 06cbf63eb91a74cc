import logging
from pathlib import Path
from typing import Optional, Union


def setup_logging(level: Union[str, int] = logging.INFO, log_file: Optional[Union[str, Path]] = None):
    """Setup logging configuration."""
    if isinstance(level, str):
        level = getattr(logging, level.upper(), logging.INFO)

    handlers = [logging.StreamHandler()]
    if log_file is not None:
        log_file = Path(log_file)
        log_file.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_file))

    logging.basicConfig(
        level=level,
        format='%(asctime)s - %(levelname)s - %(message)s',
        handlers=handlers
    )
