from filepatcher.core.selftests import FilePatcherSelfTests


def test_selftests_pass():
    ok, report = FilePatcherSelfTests.run()
    assert ok, report
    assert report.count("OK:") == 7
