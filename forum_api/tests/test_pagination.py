from forum_api.utils import pagination

def test_defaults():
    params = pagination.resolve()
    assert params == pagination.PageParams(page=1, limit=20, skip=0)

def test_offset_from_page_and_limit():
    params = pagination.resolve("3", "10")
    assert params.page == 3
    assert params.limit == 10
    assert params.skip == 20

def test_invalid_values_fall_back_to_defaults():
    assert pagination.resolve("abc", "xyz") == pagination.resolve()
    assert pagination.resolve("0", "-5") == pagination.resolve()

def test_limit_above_maximum_uses_default():
    assert pagination.resolve(1, 51).limit == 20
    assert pagination.resolve(1, 50).limit == 50

def test_custom_defaults():
    params = pagination.resolve("2", None, default_limit=5, max_limit=5)
    assert params.limit == 5
    assert params.skip == 5

def test_total_pages():
    assert pagination.total_pages(0, 20) == 1
    assert pagination.total_pages(20, 20) == 1
    assert pagination.total_pages(21, 20) == 2
    assert pagination.total_pages(45, 20) == 3
    assert pagination.total_pages(100, 7) == 15
