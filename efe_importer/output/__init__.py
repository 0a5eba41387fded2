"""Feed output: the article collection and its RSS/Atom rendering."""

from .renderers import render_atom_entry, render_rss_item
from .collection import ArticleCollection, save_feed_file

__all__ = ["render_atom_entry", "render_rss_item", "ArticleCollection", "save_feed_file"]
