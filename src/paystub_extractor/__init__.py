"""Paystub Extractor: structured data extraction from paystub documents.

This package turns uploaded paystubs (native PDFs, scanned PDFs and page
images) into structured, confidence-scored records with support for:
- Native PDF text extraction with pdfplumber
- External plain-text and OCR fallbacks (pdftotext, pdf2image, pytesseract)
- Provider-aware pattern matching for common payroll vendors
- Section-aware parsing of earnings, deductions, taxes and YTD totals
- Pay-frequency inference and completeness scoring

Results are returned to the caller; nothing is persisted.
"""

__version__ = "0.1.0"
