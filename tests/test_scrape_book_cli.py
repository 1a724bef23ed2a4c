import scrape_book

from conftest import chapter_html


def test_parse_args_maps_tuning_flags():
    args = scrape_book.parse_args(["https://novels.example/book/42/", "--volume-size", "20",
                                   "--subfolder", "novels", "--no-clean"])
    assert args.url == "https://novels.example/book/42/"
    assert args.volume_size == 20
    assert args.download_path == "novels"
    assert args.clean_empty_lines is False
    assert args.batch_size is None


def test_format_progress_message():
    line = scrape_book.format_message({"type": "progress", "current": 3, "total": 10,
                                       "status": "Chapter 3/10", "details": "Processed: 第3章",
                                       "paused": True})
    assert line == "[3/10] Chapter 3/10 (paused) Processed: 第3章"


def test_format_terminal_message():
    assert scrape_book.format_message({"type": "error", "details": "boom"}) == "[ERROR] boom"


def test_invalid_chapter_range_exits_early(capsys):
    assert scrape_book.main(["https://novels.example/book/42/", "--chapters", "9-1"]) == 2
    assert "Invalid chapter range" in capsys.readouterr().out


def test_single_flag_saves_one_page(make_orchestrator, writer, monkeypatch, capsys):
    url = "https://novels.example/book/42/7.html"
    orchestrator = make_orchestrator({url: chapter_html("第7章 Seven")})
    monkeypatch.setattr(scrape_book, "build_orchestrator", lambda args: orchestrator)

    assert scrape_book.main([url, "--single"]) == 0
    assert list(writer.files) == ["第7章 Seven.txt"]
    assert "Saved 第7章 Seven.txt" in capsys.readouterr().out


def test_single_flag_reports_extraction_failure(make_orchestrator, monkeypatch, capsys):
    url = "https://novels.example/book/42/7.html"
    orchestrator = make_orchestrator({url: "<html><body><p>Short</p></body></html>"})
    monkeypatch.setattr(scrape_book, "build_orchestrator", lambda args: orchestrator)

    assert scrape_book.main([url, "--single"]) == 1
    assert "No chapter content found" in capsys.readouterr().out
