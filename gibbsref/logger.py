"""Logging for gibbsref: a TRACE level between INFO and DEBUG, configured by verbosity"""

import logging

LOG_FORMAT = "%(levelname)s:%(name)s - %(message)s"


class GibbsRefLogger(logging.getLoggerClass()):
    TRACE = 15
    def trace(self, *args, **kwargs):
        if self.isEnabledFor(self.TRACE):
            self.log(self.TRACE, *args, **kwargs)


# verbosity 2 is where expression building is traced per phase
_VERBOSITY_LOG_LEVELS = {
    0: logging.WARNING,
    1: logging.INFO,
    2: GibbsRefLogger.TRACE,
    3: logging.DEBUG,
}


def _setup_logging():
    logging.addLevelName(GibbsRefLogger.TRACE, "TRACE")
    logging.setLoggerClass(GibbsRefLogger)


def config_logger(verbosity=0, filename=None, reset_handlers=True):
    """Send gibbsref log records to stderr or a file at a verbosity level.

    Verbosity levels:

    * 0: Warning
    * 1: Info
    * 2: Trace
    * 3: Debug

    Parameters
    ----------
    verbosity : int
    filename : Optional[str]
        Log file to write to. If None, records go to stderr.
    reset_handlers : bool
        If True, handlers already on the root logger are removed first.

    Returns
    -------
    logging.Handler
        The handler that was added, so callers can remove or close it.

    Raises
    ------
    ValueError
        If the verbosity is not one of the levels above.

    """
    if verbosity not in _VERBOSITY_LOG_LEVELS:
        raise ValueError(f"Verbosity must be one of {sorted(_VERBOSITY_LOG_LEVELS)}, got {verbosity}.")
    root_logger = logging.getLogger()
    root_logger.setLevel(_VERBOSITY_LOG_LEVELS[verbosity])

    if reset_handlers:
        for old_handler in list(root_logger.handlers):
            root_logger.removeHandler(old_handler)

    if filename is not None:
        handler = logging.FileHandler(filename)
    else:
        handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    # records from pycalphad, sympy, etc. are dropped
    handler.addFilter(logging.Filter('gibbsref'))
    root_logger.addHandler(handler)
    return handler
