"""Per-folder keyword aggregation.

The keyword set of a folder is the union of its local tags (as
``namespace:stem``), the tags of its linked gallery, its own title, and
the gallery's title and alternate-language title. The index is rebuilt
from the store on every search and never persisted.
"""

import logging
import time

from imgshelf.storage.backends.sqlite import SQLiteBackend
from imgshelf.storage.exceptions import QueryError

from .exceptions import KeywordIndexUnavailableError

logger = logging.getLogger(__name__)

KeywordIndex = dict[int, list[str]]

KEYWORD_SQL = """
    SELECT f.fid AS fid, ft.namespace || ':' || ft.stem AS kw
    FROM img_folders AS f INNER JOIN folder_tags AS ft ON f.fid = ft.fid
    UNION
    SELECT f.fid AS fid, et.tag AS kw
    FROM img_folders AS f INNER JOIN ehentai_tags AS et ON f.eh_gid = et.gid
    WHERE f.eh_gid != ''
    UNION
    SELECT fid, title AS kw FROM img_folders
    UNION
    SELECT f.fid AS fid, em.title AS kw
    FROM img_folders AS f INNER JOIN ehentai_metadata AS em ON f.eh_gid = em.gid
    WHERE f.eh_gid != ''
    UNION
    SELECT f.fid AS fid, em.title_jpn AS kw
    FROM img_folders AS f INNER JOIN ehentai_metadata AS em ON f.eh_gid = em.gid
    WHERE f.eh_gid != ''
    ORDER BY fid
"""


class KeywordIndexBuilder:
    """Build the folder id -> keywords mapping from the store."""

    def __init__(self, backend: SQLiteBackend):
        self.backend = backend

    def build(self) -> KeywordIndex:
        """Aggregate keywords for every folder.

        Null and empty keywords are dropped, so a folder with no keyword
        from any source is absent from the result.

        Raises:
            KeywordIndexUnavailableError: If the aggregation query fails.
        """
        start = time.perf_counter()
        try:
            rows = self.backend.query(KEYWORD_SQL)
        except QueryError as e:
            raise KeywordIndexUnavailableError(str(e)) from e

        index: KeywordIndex = {}
        for row in rows:
            keyword = row["kw"]
            if not keyword:
                continue
            index.setdefault(int(row["fid"]), []).append(keyword)

        elapsed = (time.perf_counter() - start) * 1000
        logger.info(f"Built keyword index for {len(index)} folders in {elapsed:.1f}ms")
        return index


def build_keyword_index(backend: SQLiteBackend) -> KeywordIndex:
    return KeywordIndexBuilder(backend).build()
