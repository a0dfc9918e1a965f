"""OpenSubtitlesSearchClientのテスト"""

from typing import Any

import pytest

from src.domain.entities import Credentials, MediaFingerprint, Session
from src.domain.exceptions import ProtocolError
from src.infrastructure.opensubtitles_searcher import OpenSubtitlesSearchClient, parse_candidates
from src.infrastructure.rpc_session import RpcSession

FINGERPRINT = MediaFingerprint(hash=0x8E245D9679D31E12, size_bytes=12909756)


def item(**overrides: Any) -> dict[str, Any]:
    """SearchSubtitles の結果1件（サーバーは数値も文字列で返す）"""
    base = {
        "IDSubtitleFile": "1951976245",
        "SubLanguageID": "eng",
        "SubFormat": "srt",
        "SubDownloadLink": "https://dl.opensubtitles.org/en/download/src-api/vrf-19d/file/1951976245.gz",
        "MatchedBy": "moviehash",
        "MovieHash": "8e245d9679d31e12",
        "SubDownloadsCnt": "1523",
        "SubRating": "7.5",
        "SubFileName": "Movie.2019.720p.srt",
        "SubEncoding": "UTF-8",
    }
    base.update(overrides)
    return base


def make_session() -> Session:
    return Session(token="tok-1", endpoint="https://rpc.example", credentials=Credentials())


class TestSearch:
    """searchのテスト"""

    def test_single_combined_query(self, scripted_transport, rpc_status) -> None:
        """全言語を1回のクエリにまとめる"""
        transport = scripted_transport({"SearchSubtitles": [rpc_status("200 OK", [item()])]})
        client = OpenSubtitlesSearchClient(RpcSession(transport, keepalive_interval_sec=0))

        client.search(make_session(), FINGERPRINT, {"pol", "ENG"})

        assert transport.methods == ["SearchSubtitles"]
        token, criteria = transport.calls[0][1]
        assert token == "tok-1"
        assert criteria == [
            {
                "moviehash": "8e245d9679d31e12",
                "moviebytesize": "12909756",
                "sublanguageid": "eng,pol",
            }
        ]

    def test_no_languages_means_all(self, scripted_transport, rpc_status) -> None:
        transport = scripted_transport({"SearchSubtitles": [rpc_status("200 OK", False)]})
        client = OpenSubtitlesSearchClient(RpcSession(transport, keepalive_interval_sec=0))

        assert client.search(make_session(), FINGERPRINT, []) == []
        assert transport.calls[0][1][1][0]["sublanguageid"] == "all"

    def test_candidates(self, scripted_transport, rpc_status) -> None:
        transport = scripted_transport({"SearchSubtitles": [rpc_status("200 OK", [item()])]})
        client = OpenSubtitlesSearchClient(RpcSession(transport, keepalive_interval_sec=0))

        [candidate] = client.search(make_session(), FINGERPRINT, ["eng"])

        assert candidate.id == "1951976245"
        assert candidate.language_code == "eng"
        assert candidate.format == "srt"
        assert candidate.matched_by_hash is True
        assert candidate.downloads_count == 1523
        assert candidate.rating == 7.5
        assert candidate.encoding == "UTF-8"
        assert candidate.download_url.endswith("1951976245.gz")

    def test_unrequested_language_dropped(self, scripted_transport, rpc_status) -> None:
        """要求していない言語の結果は除外"""
        data = [item(), item(IDSubtitleFile="2", SubLanguageID="ger")]
        transport = scripted_transport({"SearchSubtitles": [rpc_status("200 OK", data)]})
        client = OpenSubtitlesSearchClient(RpcSession(transport, keepalive_interval_sec=0))

        found = client.search(make_session(), FINGERPRINT, ["eng"])
        assert [c.id for c in found] == ["1951976245"]


class TestParseCandidates:
    """parse_candidatesのテスト"""

    @pytest.mark.parametrize("data", [False, None, []])
    def test_empty(self, data: Any) -> None:
        """0件は空リスト"""
        assert parse_candidates(data, FINGERPRINT) == []

    def test_data_not_array(self) -> None:
        with pytest.raises(ProtocolError, match="array"):
            parse_candidates({"oops": 1}, FINGERPRINT)

    def test_item_not_struct(self) -> None:
        with pytest.raises(ProtocolError, match="struct"):
            parse_candidates(["nope"], FINGERPRINT)

    @pytest.mark.parametrize("field", ["IDSubtitleFile", "SubLanguageID", "SubFormat", "SubDownloadLink"])
    def test_missing_required_field(self, field: str) -> None:
        """必須フィールドがなければ ProtocolError"""
        broken = item()
        del broken[field]
        with pytest.raises(ProtocolError, match=field):
            parse_candidates([broken], FINGERPRINT)

    def test_non_numeric_downloads(self) -> None:
        with pytest.raises(ProtocolError, match="SubDownloadsCnt"):
            parse_candidates([item(SubDownloadsCnt="many")], FINGERPRINT)

    def test_non_numeric_rating(self) -> None:
        with pytest.raises(ProtocolError, match="SubRating"):
            parse_candidates([item(SubRating="great")], FINGERPRINT)

    def test_zero_rating_is_unrated(self) -> None:
        """評価 0.0 は未評価"""
        [candidate] = parse_candidates([item(SubRating="0.0")], FINGERPRINT)
        assert candidate.rating is None

    def test_matched_by_fulltext(self) -> None:
        [candidate] = parse_candidates([item(MatchedBy="fulltext")], FINGERPRINT)
        assert candidate.matched_by_hash is False

    def test_matched_by_missing_compares_hash(self) -> None:
        """MatchedBy がなければ MovieHash を比較"""
        same = item()
        del same["MatchedBy"]
        other = item(IDSubtitleFile="2", MovieHash="0000000000000001")
        del other["MatchedBy"]

        first, second = parse_candidates([same, other], FINGERPRINT)

        assert first.matched_by_hash is True
        assert second.matched_by_hash is False

    def test_missing_downloads_is_zero(self) -> None:
        data = item()
        del data["SubDownloadsCnt"]
        [candidate] = parse_candidates([data], FINGERPRINT)
        assert candidate.downloads_count == 0
