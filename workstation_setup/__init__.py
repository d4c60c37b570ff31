"""Idempotent provisioning for a fresh Debian/Ubuntu workstation."""

APP_NAME = "Workstation Setup"
VERSION = "1.0.0"
