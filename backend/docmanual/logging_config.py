"""Logging setup for the manual service."""

import logging
import sys


def setup_logging(level: str | int = logging.INFO, name: str = "docmanual") -> logging.Logger:
	"""
	Configure and return the package logger.

	Args:
		level: Logging level name or number.
		name: Logger name; module loggers under it inherit the handler.

	Returns:
		Configured logger.
	"""
	log = logging.getLogger(name)
	if isinstance(level, str):
		level = logging.getLevelName(level.upper())
		if not isinstance(level, int):
			level = logging.INFO
	log.setLevel(level)
	if log.handlers:
		return log

	fmt = logging.Formatter(
		"%(asctime)s | %(levelname)s | %(name)s | %(message)s",
		datefmt="%Y-%m-%d %H:%M:%S",
	)
	h = logging.StreamHandler(sys.stderr)
	h.setFormatter(fmt)
	log.addHandler(h)
	return log
