from upload_validator.services.collision_resolver import ci_file_exists
from upload_validator.services.collision_resolver import resolve_collision


def _taken(*names):
    lowered = {name.lower() for name in names}

    def _exists(path):
        return path.rsplit("/", 1)[-1].lower() in lowered

    return _exists


def test_free_name_is_returned_without_counter():
    assert resolve_collision("/up/", "photo", "", "jpg", 150, exists=_taken()) == ("photo", "")


def test_existing_name_gets_counter_regardless_of_case(tmp_path):
    (tmp_path / "photo.jpg").write_bytes(b"x")
    directory = f"{tmp_path}/"

    base, counter = resolve_collision(directory, "Photo", "", "jpg", 150)

    assert base + counter == "Photo(1)"


def test_counter_keeps_growing_until_free():
    exists = _taken("report.pdf", "report(1).pdf", "REPORT(2).pdf")
    assert resolve_collision("/up/", "report", "", "pdf", 150, exists=exists) == ("report", "(3)")


def test_counter_is_placed_before_the_dimension_suffix():
    probed = []

    def _exists(path):
        probed.append(path)
        return len(probed) == 1

    base, counter = resolve_collision("/up/", "cat", "-400x300", "png", 150, exists=_exists)

    assert (base, counter) == ("cat", "(1)")
    assert probed == ["/up/cat-400x300.png", "/up/cat(1)-400x300.png"]


def test_base_is_truncated_to_make_room_for_counter():
    base_name = "abcdefghijklmnopqrstuvwxyz"
    exists = _taken("abcdefghijklmnop.jpg", "abcdefghijklm(1).jpg")

    base, counter = resolve_collision("/up/", base_name, "", "jpg", 20, exists=exists)

    assert (base, counter) == ("abcdefghijklm", "(2)")
    assert len(f"{base}{counter}.jpg") <= 20


def test_length_budget_holds_for_long_counters():
    taken = {"x" * 16 + ".txt"} | {f"{'x' * (16 - len(str(i)) - 2)}({i}).txt" for i in range(1, 120)}
    base, counter = resolve_collision("/up/", "x" * 40, "", "txt", 20, exists=_taken(*taken))

    assert counter == "(120)"
    assert len(f"{base}{counter}.txt") <= 20


def test_truncation_is_by_code_point():
    base, counter = resolve_collision("/up/", "é" * 30, "", "png", 20, exists=_taken())
    assert base == "é" * 16
    assert counter == ""


def test_overwrite_skips_probing():
    def _boom(_path):
        raise AssertionError("must not probe")

    assert resolve_collision("/up/", "photo", "", "jpg", 150, overwrite=True, exists=_boom) == ("photo", "")


def test_ci_file_exists(tmp_path):
    (tmp_path / "Mixed.Case.TXT").write_text("x")
    assert ci_file_exists(str(tmp_path / "mixed.case.txt"))
    assert ci_file_exists(str(tmp_path / "Mixed.Case.TXT"))
    assert not ci_file_exists(str(tmp_path / "other.txt"))
    assert not ci_file_exists(str(tmp_path / "missing-dir" / "file.txt"))
