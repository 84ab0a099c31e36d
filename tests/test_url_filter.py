# File: tests/test_url_filter.py
import pytest

from docs_mirror.config import MirrorConfig
from docs_mirror.crawler.url_filter import FilterDecision, UrlFilter, upgrade_scheme

from tests.conftest import HOST


@pytest.mark.parametrize(
    "url",
    [
        f"https://{HOST}/ec2/index.html",
        f"https://{HOST}/ec2/latest/userguide/concepts.html",
        f"https://{HOST}/",
        f"https://{HOST}/lambda/latest/dg/welcome.html?x=1",
        f"https://{HOST}/s3/cdk/not-first-segment.html",
        f"https://{HOST}/en_us_extra/page.html",
    ],
)
def test_included(url_filter, url):
    assert url_filter.check(url) is FilterDecision.INCLUDED
    assert url_filter.should_include(url)


@pytest.mark.parametrize(
    "url",
    [
        "https://other.example.com/ec2/index.html",
        "https://sub.docs.example.com/ec2/index.html",
        f"https://{HOST}.evil.com/ec2/index.html",
        f"https://{HOST}:8443/ec2/index.html",
    ],
)
def test_other_host_rejected_regardless_of_path(url_filter, url):
    assert url_filter.check(url) is FilterDecision.OTHER_HOST
    assert not url_filter.should_include(url)


@pytest.mark.parametrize(
    "segment",
    ["cdk", "en_us", "ja_jp", "sdk-for-java", "AWSJavaScriptSDK", "sdkfornet1", "xray-sdk-for-java"],
)
def test_excluded_segments(url_filter, segment):
    url = f"https://{HOST}/{segment}/api/index.html"
    assert url_filter.check(url) is FilterDecision.EXCLUDED
    assert not url_filter.should_include(url)


@pytest.mark.parametrize(
    "url",
    [
        "https://DOCS.EXAMPLE.COM/cdk/api/index.html",
        "HTTPS://docs.example.com/sdk-for-java/index.html",
        "https://Docs.Example.com/ja_jp/ec2/index.html",
    ],
)
def test_excluded_segments_with_mixed_case_host_or_scheme(url_filter, url):
    assert url_filter.check(url) is FilterDecision.EXCLUDED


def test_segment_case_is_significant(url_filter):
    assert url_filter.check(f"https://{HOST}/CDK/api/index.html") is FilterDecision.INCLUDED


def test_excluded_segment_needs_trailing_slash(url_filter):
    # a page literally named like an excluded tree is not inside that tree
    assert url_filter.should_include(f"https://{HOST}/cdk.html")


@pytest.mark.parametrize(
    "url",
    [f"http://{HOST}/ec2/index.html", f"ftp://{HOST}/ec2/index.html"],
)
def test_insecure_or_other_scheme_rejected(url_filter, url):
    assert url_filter.check(url) is FilterDecision.WRONG_SCHEME


@pytest.mark.parametrize(
    "url",
    ["", "not a url", "/relative/path.html", "https://[::1/broken", f"https://{HOST}:99999/x"],
)
def test_invalid_input_is_rejected_not_raised(url_filter, url):
    assert url_filter.check(url) is FilterDecision.INVALID
    assert not url_filter.should_include(url)


def test_filter_is_pure(url_filter):
    urls = [f"https://{HOST}/ec2/", f"https://{HOST}/cdk/", "https://x.org/", "::"]
    first = [url_filter.should_include(u) for u in urls]
    second = [url_filter.should_include(u) for u in urls]
    assert first == second == [True, False, False, False]


def test_upgrade_scheme_is_callers_job(url_filter):
    url = f"http://{HOST}/ec2/"
    assert not url_filter.should_include(url)
    assert upgrade_scheme(url) == f"https://{HOST}/ec2/"
    assert url_filter.should_include(url_filter.upgrade(url))
    assert upgrade_scheme(f"https://{HOST}/http://x") == f"https://{HOST}/http://x"


def test_from_config_uses_configured_host_and_denylist():
    cfg = MirrorConfig(host="Docs.Example.COM", excluded_segments=("private",))
    f = UrlFilter.from_config(cfg)
    assert f.host == HOST
    assert not f.should_include(f"https://{HOST}/private/a.html")
    assert f.should_include(f"https://{HOST}/sdk-for-java/a.html")
    assert not f.should_include(f"https://{HOST}/cdk/a.html")


def test_default_filter_targets_aws_docs():
    f = UrlFilter()
    assert f.should_include("https://docs.aws.amazon.com/ec2/index.html")
    assert not f.should_include("https://docs.aws.amazon.com/sdk-for-go/api/index.html")
    assert "docs\\.aws\\.amazon\\.com" in f.pattern
