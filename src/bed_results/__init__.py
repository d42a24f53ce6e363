"""BEd results scraper.

Automates result lookups on a captcha-gated examination portal:

- ResultsScraper: per-roll-number retry state machine driving a browser page
- CaptchaResolver: races several OCR profiles, caches solved captchas
- RecognitionPool: round-robin pool of Tesseract engine handles
- BatchDispatcher: fans batches out across worker processes with sequential fallback
- PerformanceMonitor: captcha solving counters for reporting
"""

__version__ = "1.0.0"
