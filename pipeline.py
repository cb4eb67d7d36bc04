"""
Reservation Parsing Pipeline

Main orchestration module. One parse runs these steps in order:

    ValidateFile → Load → ExtractText → MapFields → Validate

Any step can end the parse early with a ParseFailure that names the step.
The parser never raises for document problems. Missing files, encrypted or
corrupt PDFs, image-only scans and records with too little data all come
back as values:

- ParseSuccess: fields extracted, no validation findings
- ParsePartialSuccess: minimum record present, findings attached as warnings
- ParseFailure: error code, user message, failing step

Batches run each document through its own pipeline on a bounded thread pool.
One document's failure never touches another's result.
"""

import threading
import time
import uuid
from dataclasses import dataclass, field, fields
from datetime import date
from enum import Enum
from pathlib import Path
from typing import Any, Callable, List, Optional, Union

import yaml
from loguru import logger

from errors import ParseErrorCode, to_user_message
from extractor import (
    DocumentLoadError,
    EncryptedDocumentError,
    MalformedDocumentError,
    PDFTextExtractor,
    classify_by_message,
    normalize_text,
)
from parsing import ExtractedReservationData, FieldMapper
from performance import WorkerConfig, WorkerPool
from validation import ReservationValidator, is_insufficient


DEFAULT_CONFIG_PATH = Path(__file__).parent / 'config' / 'parser.yaml'
TEXT_SOURCE_LABEL = '<text>'


@dataclass
class ParserConfig:
    """Settings for the reservation parser."""

    # Text acquisition
    max_pages: int = 5
    min_text_length: int = 100
    primary_backend: str = 'pdfplumber'

    # Field mapping
    low_amount_threshold: float = 400

    # Validation
    plausibility_years: int = 10

    # Batches
    num_workers: int = 4

    @classmethod
    def from_yaml(cls, path: Union[str, Path]) -> 'ParserConfig':
        """
        Load settings from the `settings:` mapping of a YAML file.

        Unknown keys are ignored with a warning.
        """
        with open(path, 'r', encoding='utf-8') as f:
            data = yaml.safe_load(f) or {}

        settings = data.get('settings', {}) or {}
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(settings) - known)
        if unknown:
            logger.warning(f"Ignoring unknown parser settings: {', '.join(unknown)}")

        config = cls(**{k: v for k, v in settings.items() if k in known})
        logger.debug(f"Loaded parser config from {path}")
        return config

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {f.name: getattr(self, f.name) for f in fields(self)}


class ParseStep(Enum):
    """Pipeline steps, in execution order."""
    VALIDATE_FILE = 'ValidateFile'
    LOAD = 'Load'
    EXTRACT_TEXT = 'ExtractText'
    MAP_FIELDS = 'MapFields'
    VALIDATE = 'Validate'


class ParseStatus(Enum):
    SUCCESS = 'success'
    PARTIAL_SUCCESS = 'partial_success'
    FAILURE = 'failure'


@dataclass(frozen=True)
class StepRecord:
    """Timing of one completed (or failed) step."""
    step: ParseStep
    duration_ms: float
    ok: bool = True

    def to_dict(self) -> dict:
        return {
            'step': self.step.value,
            'duration_ms': round(self.duration_ms, 2),
            'ok': self.ok,
        }


@dataclass(frozen=True)
class ParseSuccess:
    """All fields mapped and no validation findings."""
    data: ExtractedReservationData
    source: str
    correlation_id: str
    steps: tuple = ()

    status = ParseStatus.SUCCESS

    @property
    def findings(self) -> tuple:
        return ()

    def to_dict(self) -> dict:
        return {
            'status': self.status.value,
            'source': self.source,
            'correlation_id': self.correlation_id,
            'data': self.data.to_dict(),
            'findings': [],
            'steps': [s.to_dict() for s in self.steps],
        }


@dataclass(frozen=True)
class ParsePartialSuccess:
    """Minimum record present; remaining findings are warnings for a reviewer."""
    data: ExtractedReservationData
    findings: tuple
    source: str
    correlation_id: str
    steps: tuple = ()

    status = ParseStatus.PARTIAL_SUCCESS

    @property
    def warnings(self) -> List[str]:
        return [f.message for f in self.findings]

    def to_dict(self) -> dict:
        return {
            'status': self.status.value,
            'source': self.source,
            'correlation_id': self.correlation_id,
            'data': self.data.to_dict(),
            'findings': [f.to_dict() for f in self.findings],
            'steps': [s.to_dict() for s in self.steps],
        }


@dataclass(frozen=True)
class ParseFailure:
    """The parse stopped at `failing_step` with an error code."""
    code: ParseErrorCode
    message: str
    failing_step: ParseStep
    source: str
    correlation_id: str
    steps: tuple = ()
    findings: tuple = ()
    detail: Optional[str] = None

    status = ParseStatus.FAILURE

    @property
    def data(self) -> None:
        return None

    def to_dict(self) -> dict:
        return {
            'status': self.status.value,
            'source': self.source,
            'correlation_id': self.correlation_id,
            'code': self.code.value,
            'message': self.message,
            'failing_step': self.failing_step.value,
            'detail': self.detail,
            'findings': [f.to_dict() for f in self.findings],
            'steps': [s.to_dict() for s in self.steps],
        }


ParseOutcome = Union[ParseSuccess, ParsePartialSuccess, ParseFailure]


class _StepTrace:
    """Records step timings for one parse."""

    def __init__(self):
        self.records: List[StepRecord] = []
        self.current: Optional[ParseStep] = None
        self._started = 0.0

    def start(self, step: ParseStep) -> None:
        self.current = step
        self._started = time.perf_counter()

    def done(self, ok: bool = True) -> None:
        if self.current is None:
            return
        elapsed = (time.perf_counter() - self._started) * 1000
        self.records.append(StepRecord(self.current, elapsed, ok))
        logger.debug(f"{self.current.value} {'done' if ok else 'failed'} in {elapsed:.1f} ms")
        if ok:
            self.current = None


@dataclass
class BatchParseReport:
    """Outcomes of a batch, in the order the documents were given."""
    outcomes: List[ParseOutcome] = field(default_factory=list)
    duration_ms: float = 0.0

    @property
    def total(self) -> int:
        return len(self.outcomes)

    @property
    def succeeded(self) -> int:
        return sum(1 for o in self.outcomes if o.status == ParseStatus.SUCCESS)

    @property
    def partial(self) -> int:
        return sum(1 for o in self.outcomes if o.status == ParseStatus.PARTIAL_SUCCESS)

    @property
    def failed(self) -> int:
        return sum(1 for o in self.outcomes if o.status == ParseStatus.FAILURE)

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            'summary': {
                'total': self.total,
                'succeeded': self.succeeded,
                'partial': self.partial,
                'failed': self.failed,
                'duration_ms': round(self.duration_ms, 2),
            },
            'outcomes': [o.to_dict() for o in self.outcomes],
        }


class ReservationParser:
    """
    Parses booking PDFs into reservation data.

    Usage:
        parser = ReservationParser()
        outcome = parser.parse("booking.pdf", nights=3)

        if outcome.status == ParseStatus.FAILURE:
            print(outcome.code, outcome.message, outcome.failing_step)
        else:
            print(outcome.data.guest_name, outcome.findings)

    The text source is any object with
    `extract_pages(path, max_pages) -> list[str]`; PDFTextExtractor by default.
    """

    def __init__(self, config: Optional[ParserConfig] = None, text_source: Any = None):
        self.config = config or ParserConfig()
        self._text_source = text_source
        self._source_lock = threading.Lock()

        self.mapper = FieldMapper(low_amount_threshold=self.config.low_amount_threshold)
        self.validator = ReservationValidator(plausibility_years=self.config.plausibility_years)

    @property
    def text_source(self):
        with self._source_lock:
            if self._text_source is None:
                self._text_source = PDFTextExtractor(primary_backend=self.config.primary_backend)
            return self._text_source

    def parse(
        self,
        pdf_path: Union[str, Path],
        nights: Optional[int] = None,
        business_date: Optional[date] = None,
    ) -> ParseOutcome:
        """
        Parse one booking PDF.

        Args:
            pdf_path: Path to the PDF file
            nights: Nights count known to the caller, checked against the dates
            business_date: Operative "today" for the plausibility check

        Returns:
            ParseSuccess, ParsePartialSuccess or ParseFailure
        """
        correlation_id = str(uuid.uuid4())
        source = str(pdf_path)
        trace = _StepTrace()
        logger.info(f"[{correlation_id[:8]}] Parsing {source}")

        try:
            trace.start(ParseStep.VALIDATE_FILE)
            path = Path(pdf_path)
            if not path.is_file():
                return self._failure(ParseErrorCode.FILE_NOT_FOUND, trace, source, correlation_id)
            trace.done()

            trace.start(ParseStep.LOAD)
            try:
                pages = self.text_source.extract_pages(path, self.config.max_pages)
            except Exception as e:
                error = e if isinstance(e, DocumentLoadError) else classify_by_message(e, path)
                return self._failure(
                    self._load_error_code(error), trace, source, correlation_id, detail=str(e),
                )
            trace.done()

            return self._run_text_steps(pages, nights, business_date, trace, source, correlation_id)

        except Exception as e:
            logger.exception(f"[{correlation_id[:8]}] Unexpected error while parsing {source}")
            return self._failure(
                ParseErrorCode.PARSING_ERROR, trace, source, correlation_id, detail=str(e),
            )

    def parse_text(
        self,
        text: str,
        nights: Optional[int] = None,
        business_date: Optional[date] = None,
        source: str = TEXT_SOURCE_LABEL,
    ) -> ParseOutcome:
        """
        Run ExtractText, MapFields and Validate over already-acquired text.

        Useful for text coming from OCR or e-mail bodies.
        """
        correlation_id = str(uuid.uuid4())
        trace = _StepTrace()
        try:
            return self._run_text_steps([text or ''], nights, business_date, trace, source, correlation_id)
        except Exception as e:
            logger.exception(f"[{correlation_id[:8]}] Unexpected error while parsing {source}")
            return self._failure(
                ParseErrorCode.PARSING_ERROR, trace, source, correlation_id, detail=str(e),
            )

    def _run_text_steps(
        self,
        pages: List[str],
        nights: Optional[int],
        business_date: Optional[date],
        trace: _StepTrace,
        source: str,
        correlation_id: str,
    ) -> ParseOutcome:
        trace.start(ParseStep.EXTRACT_TEXT)
        text = "\n".join(normalize_text(page, aggressive=True) for page in pages[:self.config.max_pages])
        if len(text.strip()) < self.config.min_text_length:
            return self._failure(
                ParseErrorCode.PDF_NO_TEXT, trace, source, correlation_id,
                detail=f"{len(text.strip())} characters extracted",
            )
        trace.done()

        trace.start(ParseStep.MAP_FIELDS)
        data = self.mapper.extract(text)
        trace.done()

        trace.start(ParseStep.VALIDATE)
        findings = tuple(self.validator.validate(data, nights=nights, business_date=business_date))

        if is_insufficient(findings):
            return self._failure(
                ParseErrorCode.INSUFFICIENT_DATA, trace, source, correlation_id, findings=findings,
            )
        trace.done()

        steps = tuple(trace.records)
        if findings:
            logger.info(
                f"[{correlation_id[:8]}] Partial success for {source}: "
                f"{'; '.join(f.message for f in findings)}"
            )
            return ParsePartialSuccess(
                data=data, findings=findings, source=source,
                correlation_id=correlation_id, steps=steps,
            )

        logger.info(f"[{correlation_id[:8]}] Parsed {source}: {len(data.found_fields())} fields")
        return ParseSuccess(data=data, source=source, correlation_id=correlation_id, steps=steps)

    @staticmethod
    def _load_error_code(error: DocumentLoadError) -> ParseErrorCode:
        if isinstance(error, EncryptedDocumentError):
            return ParseErrorCode.PDF_ENCRYPTED
        if isinstance(error, MalformedDocumentError):
            return ParseErrorCode.PDF_MALFORMED
        return ParseErrorCode.PARSING_ERROR

    @staticmethod
    def _failure(
        code: ParseErrorCode,
        trace: _StepTrace,
        source: str,
        correlation_id: str,
        findings: tuple = (),
        detail: Optional[str] = None,
    ) -> ParseFailure:
        step = trace.current or ParseStep.VALIDATE_FILE
        trace.done(ok=False)
        logger.warning(f"[{correlation_id[:8]}] {code.value} at {step.value} for {source}")
        return ParseFailure(
            code=code,
            message=to_user_message(code),
            failing_step=step,
            source=source,
            correlation_id=correlation_id,
            steps=tuple(trace.records),
            findings=tuple(findings),
            detail=detail,
        )

    def parse_batch(
        self,
        pdf_paths: List[Union[str, Path]],
        business_date: Optional[date] = None,
        max_workers: Optional[int] = None,
        progress_callback: Optional[Callable[[ParseOutcome], None]] = None,
    ) -> BatchParseReport:
        """
        Parse many PDFs on a bounded thread pool.

        Args:
            pdf_paths: Documents to parse
            business_date: Operative "today" shared by the whole batch
            max_workers: Pool size; defaults to config.num_workers
            progress_callback: Called with each outcome as it finishes,
                from the worker thread

        Returns:
            BatchParseReport with one outcome per path, in input order
        """
        start_time = time.perf_counter()
        paths = list(pdf_paths)
        workers = max(1, min(max_workers or self.config.num_workers, len(paths) or 1))

        def parse_one(path):
            outcome = self.parse(path, business_date=business_date)
            if progress_callback:
                progress_callback(outcome)
            return outcome

        with WorkerPool(WorkerConfig(num_workers=workers)) as pool:
            results = pool.map(parse_one, paths)

        outcomes: List[ParseOutcome] = []
        for path, result in zip(paths, results):
            if result.success:
                outcomes.append(result.result)
            else:
                # The document never got through a step of its own
                outcomes.append(ParseFailure(
                    code=ParseErrorCode.PARSING_ERROR,
                    message=to_user_message(ParseErrorCode.PARSING_ERROR),
                    failing_step=ParseStep.VALIDATE_FILE,
                    source=str(path),
                    correlation_id=result.task_id,
                    detail=result.error,
                ))

        report = BatchParseReport(outcomes=outcomes, duration_ms=(time.perf_counter() - start_time) * 1000)
        logger.info(
            f"Batch of {report.total}: {report.succeeded} succeeded, "
            f"{report.partial} partial, {report.failed} failed"
        )
        return report


# Convenience functions
def parse_pdf(
    pdf_path: Union[str, Path],
    nights: Optional[int] = None,
    business_date: Optional[date] = None,
    config: Optional[ParserConfig] = None,
) -> ParseOutcome:
    """Parse a single PDF with default settings."""
    return ReservationParser(config).parse(pdf_path, nights=nights, business_date=business_date)


def parse_batch(
    pdf_paths: List[Union[str, Path]],
    business_date: Optional[date] = None,
    config: Optional[ParserConfig] = None,
) -> BatchParseReport:
    """Parse many PDFs with default settings."""
    return ReservationParser(config).parse_batch(pdf_paths, business_date=business_date)
