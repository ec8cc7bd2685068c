"""Chat Actions Service.

Server-side actions for a web chat application: model preference
cookies, conversation titling, message truncation, chat visibility and
credit-card transaction extraction from screenshots using Tesseract OCR
and a vision-capable language model.
"""
