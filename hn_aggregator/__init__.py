"""Cached aggregation of Hacker News lists, items, comment trees and refresh checks."""
