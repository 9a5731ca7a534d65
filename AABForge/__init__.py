"""
AABForge: signed app bundles from Android packages.

Converts an installable APK into a signed Android App Bundle by driving
apktool, aapt2, bundletool and jarsigner over a per-profile staging area,
and resolves the signing keys used for packages and bundles.
"""

__version__ = "1.0.0"
__author__ = "AABForge Team"
