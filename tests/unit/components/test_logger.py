import logging

from tinify_optimizer.components.logger.logger import Logger


class TestLogger:
    def test_children_share_configured_root(self) -> None:
        factory = Logger(log_format="%(name)s %(message)s", log_level="debug")

        child = factory.get_logger("OptimizeService")

        assert child.name == "tinify_optimizer.OptimizeService"
        assert child.getEffectiveLevel() == logging.DEBUG

    def test_handler_is_installed_once(self) -> None:
        Logger(log_level="INFO")
        Logger(log_level="INFO")

        assert len(logging.getLogger(Logger.ROOT_NAME).handlers) == 1
