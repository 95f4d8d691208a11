import inspect
import logging
import os
import time

import sentry_sdk

FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"
DATEFMT = "%d-%b %H:%M:%S"


class Logger:
    def __init__(
        self,
        debug: bool = False,
        level: int = None,
        name: str = "mcping",
        log_file: str = None,
        stream: bool = False,
        sentry_dsn: str = None,
        ssdk: sentry_sdk = None,
    ):
        """Initializes the logger class

        Args:
            debug (bool, optional): Show debugging. Defaults to False.
            level (int, optional): The logging level to use. Defaults to leaving it unchanged.
            name (str, optional): The logger to write to. Defaults to "mcping".
            log_file (str, optional): Also append records to this file. Defaults to None.
            stream (bool, optional): Also print records to stderr. Defaults to False.
            sentry_dsn (str, optional): Initialise sentry with this dsn. Defaults to None.
            ssdk (sentry_sdk, optional): An already initialised sentry_sdk. Defaults to None.
        """
        self.DEBUG = debug
        self.logging = logging.getLogger(name)
        if self.DEBUG:
            self.logging.setLevel(logging.DEBUG)
        elif level is not None:
            self.logging.setLevel(level)

        formatter = logging.Formatter(FORMAT, datefmt=DATEFMT)
        if log_file is not None and not any(
            isinstance(h, logging.FileHandler) and h.baseFilename == os.path.abspath(log_file)
            for h in self.logging.handlers
        ):
            handler = logging.FileHandler(log_file, mode="a", encoding="utf-8", delay=True)
            handler.setFormatter(formatter)
            self.logging.addHandler(handler)
        # FileHandler is a StreamHandler too
        if stream and not any(type(h) is logging.StreamHandler for h in self.logging.handlers):
            handler = logging.StreamHandler()
            handler.setFormatter(formatter)
            self.logging.addHandler(handler)

        if self.DEBUG:
            self.logging.debug("Debugging enabled")

        if sentry_dsn is not None and ssdk is None:
            sentry_sdk.init(
                dsn=sentry_dsn,
                traces_sample_rate=1.0,
            )
            self.sentry_sdk = sentry_sdk
        elif ssdk is not None:
            self.sentry_sdk = ssdk
        else:
            self.sentry_sdk = None

    @staticmethod
    def stack_trace(stack):
        """Returns the calling module.function"""
        return (
            stack[1].filename.replace("\\", "/").split("/")[-1].split(".")[0]
            + "."
            + f"{stack[1].function}"
        )

    def info(self, message):
        message = f"[{self.stack_trace(inspect.stack())}] {message}"
        self.logging.info(message)

    def debug(self, *args):
        msg = " ".join([str(arg) for arg in args])
        msg = f"[{self.stack_trace(inspect.stack())}] {msg}"
        self.logging.debug(msg)

    def warning(self, message):
        message = f"[{self.stack_trace(inspect.stack())}] {message}"
        self.logging.warning(message)

    def error(self, *message, **kwargs):
        message = " ".join([str(arg) for arg in message])
        message = f"[{self.stack_trace(inspect.stack())}] {message}"
        self.logging.error(message, **kwargs)

    def exception(self, message):
        message = f"[{self.stack_trace(inspect.stack())}] {message}"
        self.logging.exception(message)
        if self.sentry_sdk is not None:
            self.sentry_sdk.capture_exception()

    def timer(self, func: callable, *args, **kwargs):
        start = time.perf_counter()
        if self.sentry_sdk is not None:
            with self.sentry_sdk.start_transaction(
                name=f"{func.__name__}", op=f"{func.__name__}"
            ):
                res = func(*args, **kwargs)
        else:
            res = func(*args, **kwargs)
        end = time.perf_counter()

        tDelta = self.auto_range_time(end - start)
        self.debug(f"Function {func.__name__} took {tDelta}")
        return res

    @staticmethod
    def auto_range_time(seconds: float) -> str:
        """
        Returns a time string for a given number of seconds

        Args:
            seconds (float): The number of seconds

        Returns:
            str: The time string
        """

        units = {
            "hr": str(int(seconds // 3600)),
            "min": str(int(seconds // 60)),
            "s": str(int(seconds)),
            "ms": str(int(seconds * 1000)),
            "us": str(int(seconds * 1000000)),
            "ns": str(int(seconds * 1000000000)),
        }

        best = ("ns", units["ns"])
        units = sorted(units.items(), key=lambda x: len(x[1]))
        for unit in units:
            if unit[1] != "0":
                best = unit
                break

        return f"{best[1]} {best[0]}"
