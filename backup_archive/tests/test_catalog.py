import asyncio
import unittest

from backup_archive.catalog import list_backups, list_downloadable, list_files, parse_limit
from backup_archive.content import (
    content_disposition,
    decode_content,
    guess_content_type,
    resolve_download,
)
from backup_archive.db import InMemoryArchiveDbClient, with_timeout
from backup_archive.dependencies import UNAVAILABLE, DbHandle
from backup_archive.exceptions import StorageUnavailableError
from backup_archive.health import check_database


class SlowDbClient(InMemoryArchiveDbClient):
    async def find_backups(self, fields, limit):
        await asyncio.sleep(5)
        return []

    async def find_file(self, backup_id, relative_path):
        await asyncio.sleep(5)
        return None

    async def ping(self):
        await asyncio.sleep(5)


class ParseLimitTests(unittest.TestCase):
    def test_defaults(self):
        self.assertEqual(parse_limit(None, 50), 50)
        self.assertEqual(parse_limit("", 50), 50)
        self.assertEqual(parse_limit("abc", 50), 50)
        self.assertEqual(parse_limit("0", 100), 100)
        self.assertEqual(parse_limit("-4", 100), 100)

    def test_leading_integer(self):
        self.assertEqual(parse_limit("10", 50), 10)
        self.assertEqual(parse_limit(" 12", 50), 12)
        self.assertEqual(parse_limit("10abc", 50), 10)
        self.assertEqual(parse_limit("2.9", 50), 2)

    def test_maximum(self):
        self.assertEqual(parse_limit("5000", 50, maximum=1000), 1000)
        self.assertEqual(parse_limit("999", 50, maximum=1000), 999)
        self.assertEqual(parse_limit("5000", 50), 5000)


class CatalogReaderTests(unittest.IsolatedAsyncioTestCase):
    def setUp(self):
        self.db = InMemoryArchiveDbClient(
            backups=[
                {"_id": 1, "backup_id": "b1", "backup_name": "one", "timestamp": 100, "total_size": 10},
                {"_id": 2, "backup_id": "b3", "backup_name": "three", "timestamp": 300, "total_size": 30},
                {"_id": 3, "backup_id": "b2", "backup_name": "two", "timestamp": 200, "total_size": 20},
                {"_id": 4, "backup_id": "b0", "backup_name": "undated"},
            ],
            files=[
                {"backup_id": "b1", "relative_path": "dir", "filename": "dir", "is_directory": True},
                {"backup_id": "b1", "relative_path": "dir/a.txt", "filename": "a.txt", "file_size": 1, "content": b"a"},
                {"backup_id": "b1", "relative_path": "b.txt", "filename": "b.txt", "file_size": 2, "is_directory": False},
                {"backup_id": "b1", "relative_path": "c.bin", "filename": "c.bin", "file_size": 3, "is_chunked": True},
            ],
        )
        self.handle = DbHandle(self.db)

    async def test_list_backups_sorted_and_projected(self):
        result = await list_backups(self.handle, 10)
        self.assertTrue(result["success"])
        self.assertEqual(result["count"], len(result["backups"]))
        self.assertEqual(
            [b["backup_id"] for b in result["backups"]], ["b3", "b2", "b1", "b0"]
        )
        timestamps = [b["timestamp"] for b in result["backups"][:3]]
        self.assertEqual(timestamps, sorted(timestamps, reverse=True))
        for backup in result["backups"]:
            self.assertNotIn("_id", backup)

    async def test_list_backups_respects_limit(self):
        for limit in (1, 2, 3):
            result = await list_backups(self.handle, limit)
            self.assertEqual(result["count"], limit)
            self.assertEqual(len(result["backups"]), limit)

    async def test_list_downloadable_projection(self):
        result = await list_downloadable(self.handle, 1)
        self.assertEqual(
            result["backups"], [{"backup_id": "b3", "backup_name": "three", "timestamp": 300}]
        )

    async def test_list_files(self):
        result = await list_files(self.handle, "b1", 100)
        self.assertEqual(result["backup_id"], "b1")
        paths = [f["relative_path"] for f in result["files"]]
        self.assertEqual(paths, ["dir/a.txt", "b.txt", "c.bin"])
        self.assertEqual(result["count"], 3)
        for entry in result["files"]:
            self.assertEqual(set(entry) - {"relative_path", "file_size", "filename"}, set())

    async def test_unavailable_handle_raises_typed_error(self):
        with self.assertRaises(StorageUnavailableError):
            await list_backups(UNAVAILABLE, 10)
        with self.assertRaises(StorageUnavailableError):
            await list_files(UNAVAILABLE, "b1", 10)
        with self.assertRaises(StorageUnavailableError):
            await resolve_download(UNAVAILABLE, "b1", "dir/a.txt")

    async def test_with_timeout(self):
        self.assertEqual(await with_timeout(asyncio.sleep(0, result="done"), None), "done")
        self.assertEqual(await with_timeout(asyncio.sleep(0, result="done"), 1), "done")
        with self.assertRaises(asyncio.TimeoutError):
            await with_timeout(asyncio.sleep(5), 0.01)

    async def test_timeout(self):
        handle = DbHandle(SlowDbClient())
        with self.assertRaises(asyncio.TimeoutError):
            await list_backups(handle, 10, timeout=0.01)
        with self.assertRaises(asyncio.TimeoutError):
            await resolve_download(handle, "b1", "a.txt", timeout=0.01)
        self.assertEqual(await check_database(handle, timeout=0.01), "error")


class ContentTests(unittest.IsolatedAsyncioTestCase):
    def setUp(self):
        self.db = InMemoryArchiveDbClient(
            files=[
                {"backup_id": "b1", "relative_path": "reports/q1.pdf", "filename": "q1.pdf", "content": b"pdf"},
                {"backup_id": "b1", "relative_path": "big.iso", "filename": "big.iso", "is_chunked": True, "content": b"x"},
                {"backup_id": "b1", "relative_path": "stub.txt", "filename": "stub.txt"},
            ]
        )
        self.handle = DbHandle(self.db)

    async def test_resolve_download(self):
        download = await resolve_download(self.handle, "b1", "reports/q1.pdf")
        self.assertEqual(download.content, b"pdf")
        self.assertEqual(download.content_type, "application/pdf")
        self.assertEqual(download.headers, {"Content-Disposition": 'attachment; filename="q1.pdf"'})

        again = await resolve_download(self.handle, "b1", "reports/q1.pdf")
        self.assertEqual(again, download)

    async def test_resolve_download_not_served(self):
        self.assertIsNone(await resolve_download(self.handle, "b1", "big.iso"))
        self.assertIsNone(await resolve_download(self.handle, "b1", "stub.txt"))
        self.assertIsNone(await resolve_download(self.handle, "b2", "reports/q1.pdf"))

    async def test_check_database(self):
        self.assertEqual(await check_database(self.handle), "connected")
        self.assertEqual(await check_database(UNAVAILABLE), "disconnected")
        self.db.ping_error = RuntimeError("down")
        self.assertEqual(await check_database(self.handle), "error")

    def test_guess_content_type(self):
        self.assertEqual(guess_content_type("a.pdf"), "application/pdf")
        self.assertEqual(guess_content_type("a.png"), "image/png")
        self.assertEqual(guess_content_type("noextension"), "application/octet-stream")
        self.assertEqual(guess_content_type(None), "application/octet-stream")

    def test_content_disposition(self):
        self.assertEqual(content_disposition("a b.txt"), 'attachment; filename="a b.txt"')
        self.assertEqual(
            content_disposition("résumé.pdf"),
            "attachment; filename*=utf-8''r%C3%A9sum%C3%A9.pdf",
        )

    def test_decode_content(self):
        self.assertEqual(decode_content(b"abc"), b"abc")
        self.assertEqual(decode_content(bytearray(b"abc")), b"abc")
        self.assertEqual(decode_content(memoryview(b"abc")), b"abc")
        with self.assertRaises(TypeError):
            decode_content("abc")


if __name__ == "__main__":
    unittest.main()
