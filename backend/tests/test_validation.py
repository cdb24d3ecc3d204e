import pytest
from franchise.errors import InvalidAmount, InvalidQuantity
from franchise.config.limits import MAX_AMOUNT
from franchise.utils.validation import clip, positive_int
from franchise.config.pagination import normalize_pagination, DEFAULT_LIMIT, MAX_LIMIT


@pytest.mark.parametrize('raw, expected', [(1, 1), (5000, 5000), ('42', 42), (3.0, 3)])
def test_positive_int_accepts_whole_numbers(raw, expected):
    assert positive_int(raw) == expected


@pytest.mark.parametrize('raw', [0, -1, 2.5, True, False, None, '', 'ten', [1]])
def test_positive_int_rejects(raw):
    with pytest.raises(InvalidAmount):
        positive_int(raw)


def test_positive_int_custom_error():
    with pytest.raises(InvalidQuantity) as exc:
        positive_int(0, InvalidQuantity, 'qty')
    assert exc.value.code == 'INVALID_QUANTITY'
    assert exc.value.message == 'qty must be a positive integer'


def test_positive_int_upper_bound():
    assert positive_int(MAX_AMOUNT) == MAX_AMOUNT
    with pytest.raises(InvalidAmount) as exc:
        positive_int(MAX_AMOUNT + 1)
    assert exc.value.message == f'amount must not exceed {MAX_AMOUNT}'
    with pytest.raises(InvalidQuantity):
        positive_int(11, InvalidQuantity, 'qty', maximum=10)


@pytest.mark.parametrize('raw, expected', [(None, None), ('', None), ('   ', None), (' ab ', 'ab'), ('abcdef', 'abc'), (1234, '123')])
def test_clip(raw, expected):
    assert clip(raw, 3) == expected


def test_normalize_pagination_bounds():
    assert normalize_pagination(None, None) == (DEFAULT_LIMIT, 0)
    assert normalize_pagination('', '') == (DEFAULT_LIMIT, 0)
    assert normalize_pagination('5000', '-3') == (MAX_LIMIT, 0)
    assert normalize_pagination('0', '7') == (1, 7)
    with pytest.raises(ValueError):
        normalize_pagination('abc', None)
