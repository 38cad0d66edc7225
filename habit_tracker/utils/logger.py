import logging
import logging.config

def setup_logging(cfg=None):
    """Применить dictConfig из TrackerConfig (консоль + RotatingFileHandler)"""
    if cfg is None:
        from habit_tracker.config import config as cfg
    if cfg.log_to_file:
        cfg.log_dir.mkdir(parents=True, exist_ok=True)
    logging.config.dictConfig(cfg.get_logging_config())
    return logging.getLogger()
