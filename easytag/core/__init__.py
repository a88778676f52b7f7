"""Core services: NDEF codec, tag classification, catalog and NFC radio boundary."""
