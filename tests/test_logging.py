import logging
import unittest

from capforge.utils.logging import IMPORTANT, TRACE, DeploymentLogger, deployment_logger


class DeploymentLoggerTests(unittest.TestCase):
    def test_messages_carry_the_deployment_id(self) -> None:
        logger = deployment_logger(42, "tests.logging")
        with self.assertLogs("tests.logging", level="INFO") as captured:
            logger.info("Writing %s", "deploy.rb")
        self.assertEqual(captured.records[0].getMessage(), "[deployment 42] Writing deploy.rb")
        self.assertEqual(captured.records[0].deployment_id, 42)

    def test_important_level(self) -> None:
        logger = DeploymentLogger(logging.getLogger("tests.logging.important"), 7)
        with self.assertLogs("tests.logging.important", level=IMPORTANT) as captured:
            logger.important("authentication failed for `%s'", "deploy@app1")
        record = captured.records[0]
        self.assertEqual(record.levelno, IMPORTANT)
        self.assertEqual(record.levelname, "IMPORTANT")

    def test_trace_sits_below_debug(self) -> None:
        self.assertLess(TRACE, logging.DEBUG)
        self.assertEqual(logging.getLevelName(TRACE), "TRACE")

    def test_deployment_logger_reports_trace(self) -> None:
        logger = deployment_logger(3, "tests.logging.trace")
        self.assertEqual(logger.logger.level, TRACE)
        with self.assertLogs("tests.logging.trace", level=TRACE) as captured:
            logger.trace("Invoking %s", "production deploy")
        self.assertEqual(captured.records[0].levelname, "TRACE")
        self.assertEqual(captured.records[0].getMessage(), "[deployment 3] Invoking production deploy")


if __name__ == "__main__":
    unittest.main()
