"""Shared logging for LandmarkConverter.

All output of the package goes through one logger tree rooted at
"LandmarkConverter":

- Workflow classes inherit from LandmarkConverterBase and log through the
  root logger, each message prefixed with the class name.
- Library modules (readers, writers) log through child loggers obtained with
  get_module_logger, so their diagnostics reach the same console and file
  handlers and obey the same level.

Output can be limited to some sources with set_log_classes. A source is the
class name for workflow messages and the module name ("point_pair_reader",
"writers", ...) for library messages.

Example:
    >>> import logging
    >>> from landmark_converter.landmark_converter_base import LandmarkConverterBase
    >>>
    >>> class MyStep(LandmarkConverterBase):
    ...     def run(self):
    ...         self.log_info("Reading landmarks...")
    ...         self.log_debug("Spacing: %s", (1.0, 1.0, 2.5))
    >>>
    >>> step = MyStep(log_level=logging.DEBUG)
    >>> LandmarkConverterBase.set_log_classes(["MyStep", "writers"])
"""

import logging

LOGGER_NAME = "LandmarkConverter"
LOG_FORMAT = '%(asctime)s %(levelname)s %(message)s'
LOG_DATE_FORMAT = '%Y-%m-%d %H:%M:%S'


def get_module_logger(module_name: str) -> logging.Logger:
    """Return the child logger of a library module.

    Args:
        module_name: The module's ``__name__``; only its last component is
            used, e.g. "landmark_converter.landmark_io.writers" -> "writers"
    """
    return logging.getLogger(f"{LOGGER_NAME}.{module_name.rsplit('.', 1)[-1]}")


def _source_of(record: logging.LogRecord) -> str:
    """Class name of a workflow record, module name of a library record."""
    if hasattr(record, 'class_name'):
        return record.class_name
    return record.name.rsplit('.', 1)[-1]


class ClassNameFilter(logging.Filter):
    """Drop records whose source is not in ``allowed_classes`` while enabled."""

    def __init__(self):
        super().__init__()
        self.enabled = False
        self.allowed_classes = set()

    def filter(self, record):
        if not self.enabled:
            return True
        return _source_of(record) in self.allowed_classes


def _to_level(log_level: int | str) -> int:
    if isinstance(log_level, str):
        return getattr(logging, log_level.upper())
    return log_level


class LandmarkConverterBase:
    """Base class giving workflow classes the shared LandmarkConverter logger.

    Class Attributes:
        _shared_logger (logging.Logger): Root of the package logger tree
        _class_filter (ClassNameFilter): Source filter installed on every handler
        _logger_initialized (bool): Whether the console handler is installed

    Instance Attributes:
        class_name (str): Prefix of this instance's log messages
        log_level (int): Logging level requested by this instance
    """

    _shared_logger = None
    _class_filter = None
    _logger_initialized = False

    def __init__(
        self,
        class_name: str | None = None,
        log_level: int | str = logging.INFO,
        log_to_file: str | None = None,
    ):
        """
        Args:
            class_name: Prefix for log messages. Default: the class name
            log_level: Level as an integer (logging.DEBUG, ...) or a name
                ('DEBUG', ...). Applied when the shared logger is first set up.
                Default: logging.INFO
            log_to_file: Also write log messages to this file. Default: None
        """
        self.class_name = class_name or self.__class__.__name__
        self.log_level = _to_level(log_level)

        if not LandmarkConverterBase._logger_initialized:
            LandmarkConverterBase._initialize_shared_logger(self.log_level)
        if log_to_file is not None:
            LandmarkConverterBase.add_log_file(log_to_file)

        self.logger = LandmarkConverterBase._shared_logger

    @classmethod
    def _initialize_shared_logger(cls, log_level: int | str) -> None:
        """Install the console handler on the package logger (called once)."""
        if cls._logger_initialized:
            return

        log_level = _to_level(log_level)
        cls._shared_logger = logging.getLogger(LOGGER_NAME)
        cls._shared_logger.setLevel(log_level)
        cls._shared_logger.handlers.clear()
        cls._class_filter = ClassNameFilter()
        cls._add_handler(logging.StreamHandler())

        # Handlers of the root logger would print every message a second time
        cls._shared_logger.propagate = False
        cls._logger_initialized = True

    @classmethod
    def _add_handler(cls, handler: logging.Handler) -> None:
        handler.setLevel(cls._shared_logger.level)
        handler.addFilter(cls._class_filter)
        handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT))
        cls._shared_logger.addHandler(handler)

    @classmethod
    def add_log_file(cls, log_to_file: str) -> None:
        """Append workflow and library log messages to ``log_to_file``."""
        if not cls._logger_initialized:
            cls._initialize_shared_logger(logging.INFO)
        cls._add_handler(logging.FileHandler(log_to_file))

    @classmethod
    def set_log_level(cls, log_level: int | str) -> None:
        """Set the level of the package logger and all of its handlers.

        Example:
            >>> LandmarkConverterBase.set_log_level('DEBUG')
        """
        if cls._shared_logger is None:
            return
        log_level = _to_level(log_level)
        cls._shared_logger.setLevel(log_level)
        for handler in cls._shared_logger.handlers:
            handler.setLevel(log_level)

    @classmethod
    def set_log_classes(cls, class_names: list[str]) -> None:
        """Only show messages from these classes or library modules.

        Args:
            class_names: e.g. ["WorkflowConvertLandmarks", "point_pair_reader"]
        """
        if cls._class_filter is not None:
            cls._class_filter.enabled = True
            cls._class_filter.allowed_classes = set(class_names)

    @classmethod
    def set_log_all_classes(cls) -> None:
        """Show messages from every source again."""
        if cls._class_filter is not None:
            cls._class_filter.enabled = False
            cls._class_filter.allowed_classes.clear()

    def log_debug(self, message: str, *args) -> None:
        self._log(logging.DEBUG, message, *args)

    def log_info(self, message: str, *args) -> None:
        """Log an info message with optional %-style arguments.

        Example:
            >>> self.log_info("Read %d landmarks", landmarks.point_count)
        """
        self._log(logging.INFO, message, *args)

    def log_warning(self, message: str, *args) -> None:
        self._log(logging.WARNING, message, *args)

    def log_error(self, message: str, *args) -> None:
        self._log(logging.ERROR, message, *args)

    def _log(self, level: int, message: str, *args) -> None:
        if not self.logger.isEnabledFor(level):
            return
        record = self.logger.makeRecord(
            self.logger.name,
            level,
            "(unknown file)",
            0,
            f"{self.class_name} {message}",
            args,
            None,
        )
        # ClassNameFilter selects on this attribute
        record.class_name = self.class_name
        self.logger.handle(record)

    def log_section(self, title: str, *args, width: int = 70, char: str = '=') -> None:
        """Log ``title`` between two separator lines of ``width`` ``char``."""
        separator = char * width
        self.log_info(separator)
        self.log_info(title, *args)
        self.log_info(separator)
