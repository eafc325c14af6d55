"""
cannect — deliver Certificate-Authority assets to where they are needed.

Reads a declarative job (named catalogs of certificates, keys and CRLs held on
the local filesystem, GitHub or S3, plus orders naming destinations), checks
each asset looks like its declared PEM category, and writes the assets, or
concatenated chains of them, to files or to a shell-exportable env file.

Built on the Railway-Oriented Programming (ROP) primitives in cannect.railway
for explicit, composable error handling.
"""

__version__ = "0.1.0"
