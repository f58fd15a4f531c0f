"""
Main entry point for the transaction extraction pipeline.
"""
import argparse
import json
import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Sequence, Tuple, Union

from email_parser import EmailParser
from file_loader import FileLoader
from pdf_parser import PdfParser
from preprocess import DataPreprocessor
from schema import CustomTemplate, ExtractionResult, RecordValue, TransactionRecord
from telegram_parser import TelegramParser
from template_parser import TemplateParser
from templates import load_template
from whatsapp_parser import WhatsAppParser

logger = logging.getLogger(__name__)

SOURCES = ('whatsapp', 'telegram', 'email', 'pdf')
DEFAULT_SOURCE = 'whatsapp'

Record = Dict[str, RecordValue]
TemplateLike = Union[CustomTemplate, dict, str]


class ExtractionError(Exception):
    """Unrecoverable failure while processing an input; no partial results are returned."""


class MissingInputError(ExtractionError, ValueError):
    """No file or text was supplied."""


class TransactionProcessor:
    """Selects a source parser and returns the unified record list."""

    def __init__(self, file_loader: Optional[FileLoader] = None):
        self.logger = logging.getLogger(self.__class__.__name__)
        self.file_loader = file_loader or FileLoader()
        self.preprocessor = DataPreprocessor()

    def extract(self, content: Union[str, bytes, None], source: str = DEFAULT_SOURCE,
                template: Optional[TemplateLike] = None) -> List[Record]:
        """
        Extract transactions from one input.

        Args:
            content: Raw text, or raw bytes (required for meaningful PDF parsing)
            source: One of whatsapp, telegram, email, pdf
            template: Optional custom template; when given it overrides the source

        Returns:
            Records as flat mappings keyed by field name; empty when nothing was found
        """
        return [record.to_dict() for record in self.extract_records(content, source, template)]

    def extract_records(self, content: Union[str, bytes, None], source: str = DEFAULT_SOURCE,
                        template: Optional[TemplateLike] = None) -> List[TransactionRecord]:
        """Same as extract() but returns the validated TransactionRecord models."""
        if content is None:
            raise MissingInputError("No file or text provided")

        source = (source or DEFAULT_SOURCE).lower()
        if template is not None:
            template = load_template(template)
        elif source not in SOURCES:
            self.logger.warning(f"Unknown source '{source}', parsing as {DEFAULT_SOURCE}")
            source = DEFAULT_SOURCE

        try:
            return self._dispatch(content, source, template)
        except Exception as e:
            self.logger.error(f"Extraction failed for {source} input: {str(e)}")
            raise ExtractionError(f"Failed to process {source} input") from e

    def _dispatch(self, content: Union[str, bytes], source: str,
                  template: Optional[CustomTemplate]) -> List[TransactionRecord]:
        if template is not None:
            self.logger.info(f"Using custom template '{template.name}'")
            return TemplateParser(template).parse(self._as_text(content))

        if source == 'pdf':
            data = content if isinstance(content, bytes) else content.encode('utf-8')
            return PdfParser().parse(data)
        if source == 'telegram':
            return TelegramParser().parse(self._as_text(content))
        if source == 'email':
            return EmailParser().parse(self._as_text(content))
        return WhatsAppParser().parse(self._as_text(content))

    def _as_text(self, content: Union[str, bytes]) -> str:
        if isinstance(content, bytes):
            return self.preprocessor.decode_text(content)
        return content

    def process_file(self, file_path: str, source: str = DEFAULT_SOURCE,
                     template: Optional[TemplateLike] = None) -> ExtractionResult:
        """
        Load and process a single export file end-to-end.

        Args:
            file_path: Path to the export
            source: Source kind of the file
            template: Optional custom template

        Returns:
            ExtractionResult with the records and processing metadata
        """
        self.logger.info(f"Starting processing of file: {file_path}")

        if not file_path:
            raise MissingInputError("No file provided")

        content = self.file_loader.load_file(file_path, source, any_extension=template is not None)
        records = self.extract(content, source, template)

        metadata = {
            'source_file': str(file_path),
            'source': source,
            'template': self._template_name(template),
            'valid_transactions': len(records),
            'processing_date': datetime.now().isoformat(timespec='seconds'),
        }

        self.logger.info(f"Successfully processed {len(records)} transactions")
        return ExtractionResult(transactions=records, total_count=len(records), processing_metadata=metadata)

    def process_batch(self, files: Sequence[Tuple[str, str]],
                      template: Optional[TemplateLike] = None) -> ExtractionResult:
        """
        Process several files and merge their records, newest first.

        A file that fails is logged and left out; the others are still merged.

        Args:
            files: (file_path, source) pairs
            template: Optional custom template applied to every file

        Returns:
            ExtractionResult holding the merged, date-sorted records
        """
        if not files:
            raise MissingInputError("No files provided")

        results = []
        failed = []
        for file_path, source in files:
            try:
                results.append(self.process_file(file_path, source, template).transactions)
            except (ExtractionError, OSError, ValueError) as e:
                self.logger.warning(f"Skipping {file_path}: {str(e)}")
                failed.append(str(file_path))

        merged = merge_records(*results)
        metadata = {
            'source_files': [str(path) for path, _ in files],
            'failed_files': failed,
            'template': self._template_name(template),
            'valid_transactions': len(merged),
            'processing_date': datetime.now().isoformat(timespec='seconds'),
        }
        return ExtractionResult(transactions=merged, total_count=len(merged), processing_metadata=metadata)

    def _template_name(self, template: Optional[TemplateLike]) -> Optional[str]:
        if template is None:
            return None
        return load_template(template).name


def merge_records(*record_lists: Iterable[Record]) -> List[Record]:
    """
    Concatenate record lists and order them by date, newest first.

    Dates are parsed best-effort; records whose date cannot be parsed sort as the
    Unix epoch. Records with equal dates keep their input order.
    """
    preprocessor = DataPreprocessor()
    merged = [record for records in record_lists for record in records]
    return sorted(merged, key=lambda record: preprocessor.sort_key(record.get('Date')), reverse=True)


def configure_logging(verbose: bool = False, log_file: Optional[str] = None) -> None:
    """Configure root logging for the command line entry point."""
    handlers = [logging.StreamHandler()]
    if log_file:
        handlers.append(logging.FileHandler(log_file))

    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=handlers,
    )


def main(argv: Optional[List[str]] = None):
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(description='Extract transactions from chat, email and PDF exports')
    parser.add_argument('file_paths', nargs='+', help='Path(s) to export files')
    parser.add_argument('-s', '--source', choices=SOURCES, default=DEFAULT_SOURCE,
                        help='Kind of export (default: whatsapp)')
    parser.add_argument('-t', '--template', help='Built-in template id (mpesa, bank) or path to a template JSON file')
    parser.add_argument('-o', '--output', help='Output JSON file path')
    parser.add_argument('-v', '--verbose', action='store_true', help='Enable verbose logging')
    parser.add_argument('--log-file', help='Also write logs to this file')
    parser.add_argument('--max-size-mb', type=float, help='Reject input files larger than this')

    args = parser.parse_args(argv)
    configure_logging(args.verbose, args.log_file)

    for file_path in args.file_paths:
        if not Path(file_path).exists():
            print(f"Error: File not found - {file_path}")
            sys.exit(1)

    try:
        max_bytes = int(args.max_size_mb * 1024 * 1024) if args.max_size_mb else None
        processor = TransactionProcessor(FileLoader(max_bytes=max_bytes))
        template = load_template(args.template) if args.template else None

        if len(args.file_paths) == 1:
            result = processor.process_file(args.file_paths[0], args.source, template)
        else:
            result = processor.process_batch([(path, args.source) for path in args.file_paths], template)

        output_data = result.model_dump()

        if args.output:
            with open(args.output, 'w', encoding='utf-8') as f:
                json.dump(output_data, f, indent=2, ensure_ascii=False)
            print(f"Results written to: {args.output}")
        else:
            print(json.dumps(output_data, indent=2, ensure_ascii=False))

        print(f"\nSummary:")
        print(f"- Total transactions extracted: {result.total_count}")
        print(f"- Source: {args.source if template is None else template.name}")

        if result.total_count > 0:
            types = {}
            for transaction in result.transactions:
                kind = transaction.get('Type', 'Other')
                types[kind] = types.get(kind, 0) + 1

            print(f"\nType Breakdown:")
            for kind, count in sorted(types.items()):
                print(f"- {kind}: {count} transactions")

    except Exception as e:
        logger.error(f"Processing failed: {str(e)}")
        print(f"Error: {str(e)}")
        sys.exit(1)


if __name__ == "__main__":
    main()
