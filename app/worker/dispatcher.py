from concurrent.futures import Future, ThreadPoolExecutor

from app.config.settings import Settings
from app.logging.logger import Log
from app.worker.job_runner import OCRJobRunner

INLINE_MODE = "inline"
BACKGROUND_MODE = "background"


class OCRJobDispatcher:
    """Hands OCR jobs to the runner after the original is stored.

    inline: the job runs in the caller's thread and finishes before dispatch
    returns. background: the job is submitted to a thread pool and dispatch
    returns immediately. Jobs are not persisted; pending work is lost on exit.
    """

    MODES = (INLINE_MODE, BACKGROUND_MODE)

    def __init__(
        self,
        job_runner: OCRJobRunner,
        mode: str = BACKGROUND_MODE,
        max_workers: int = 4,
    ) -> None:
        mode = mode.lower()
        if mode not in self.MODES:
            raise ValueError(
                f"Unknown OCR processing mode '{mode}'. Choose from: {list(self.MODES)}"
            )
        self._job_runner = job_runner
        self._mode = mode
        self._executor: ThreadPoolExecutor | None = None
        if mode == BACKGROUND_MODE:
            self._executor = ThreadPoolExecutor(
                max_workers=max_workers,
                thread_name_prefix="ocr-worker",
            )

    @property
    def mode(self) -> str:
        return self._mode

    def dispatch(self, document_id: str) -> Future[bool] | None:
        """Schedule OCR for a document.

        Returns the job's future in background mode and None in inline mode.
        """
        if self._executor is None:
            self._job_runner.run(document_id)
            return None
        Log.info("Queued OCR job", document_id=document_id, mode=self._mode)
        return self._executor.submit(self._job_runner.run, document_id)

    def shutdown(self, wait: bool = True) -> None:
        if self._executor is not None:
            Log.info("Shutting down OCR workers", wait=wait)
            self._executor.shutdown(wait=wait)

    @classmethod
    def from_settings(cls, job_runner: OCRJobRunner, settings: Settings) -> "OCRJobDispatcher":
        return cls(
            job_runner,
            mode=settings.ocr_processing_mode,
            max_workers=settings.ocr_worker_threads,
        )
