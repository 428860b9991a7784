"""Locale package for the built-in string table.

Holds en.json, the default string table used before any language pack has
been downloaded. It is read through importlib.resources, so this stays a real
package to keep the file discoverable both locally and when installed.
"""
