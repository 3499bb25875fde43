"""
qrbook: session-gated client for a QR-grouped contact directory.
"""
