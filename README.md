# gostutil

A small utility library with:

- **Fixed-point decimals** (`gostutil.bignum`): up to 81 significant digits
  held in nine base-10⁹ words, with exact parsing, shifting, rounding,
  arithmetic and a compact binary encoding whose byte order matches numeric
  order.
- **Big integers** (`gostutil.bignum.integer.Integer`), convertible to and
  from a sign plus a big-endian list of 32-bit magnitude words.
- **Network helpers** (`gostutil.netutil`): local IP discovery, address
  formatting and splitting, listening on random ports, a non-blocking check
  of a connected socket, and IP pattern matching with wildcards, ranges and
  CIDR subnets.
- **Math helpers** (`gostutil.mathutil`): fixed-width absolute values and
  tolerance comparisons.

## Installation

```
pip install gostutil
```

Python 3.10 or newer is required. `psutil` is installed as a dependency; it
is used to list network interfaces.

## Decimals

The decimal type lives in `gostutil.bignum.decimal`, arithmetic in
`gostutil.bignum.arith`, and the binary encoding in `gostutil.bignum.codec`.

```python
from gostutil.bignum.decimal import Decimal, max_decimal, new_max_or_min_dec
from gostutil.bignum.words import RoundMode
from gostutil.bignum.arith import decimal_add, decimal_div, decimal_mod, compare
from gostutil.bignum.codec import to_bin, from_bin, to_hash_key

a = Decimal.from_string("123.45")
b = Decimal.from_string("-12345")
print(decimal_add(a, b).to_string())          # -12221.55

print(Decimal.from_string("15.5").round(0, RoundMode.HALF_EVEN).to_string())  # 16
print(Decimal.from_string("15.5").round(0, RoundMode.TRUNCATE).to_string())   # 15

q = decimal_div(Decimal.from_string("1"), Decimal.from_string("3"), 5)
print(q.to_string())                           # 0.333333333

print(compare(Decimal.from_string("1.1"), Decimal.from_string("1.2")))  # -1

data = to_bin(Decimal.from_string("-10.55"), 4, 2)
print(from_bin(data, 4, 2).to_string())       # -10.55

print(max_decimal(4, 2).to_string())           # 99.99
print(str(new_max_or_min_dec(True, 2, 1)))     # -9.9
```

Other operations: `decimal_sub`, `decimal_mul`, `decimal_mod`, `decimal_neg`;
`Decimal.shift(n)` multiplies by `10**n`; `Decimal.from_float`,
`Decimal.to_float`, `to_int` and `to_uint` convert to and from Python numbers;
`to_json` / `Decimal.from_json` keep the internal form losslessly;
`to_hash_key` gives equal keys for values that compare equal. `str()` of a
decimal rounds it to its result fraction digits, while `to_string()` prints
it without rounding.

### Errors

Problems are reported by raising subclasses of `DecimalError`
(`gostutil.bignum.words`): `DecimalBadNumber`, `DecimalOverflow`,
`DecimalTruncated` and `DecimalDivisionByZero`. Where a best-effort value
exists, it is in the exception's `result` attribute:

```python
from gostutil.bignum.words import DecimalTruncated

try:
    Decimal.from_string("123.45.")
except DecimalTruncated as exc:
    print(exc.result.to_string())             # 123.45
```

### Limiting the word buffer

`word_buffer_length(n)` is a context manager that limits decimals to `n`
words (1 to 9) within its block; `current_word_buffer_length()` reports the
limit in effect.

## Big integers

```python
from gostutil.bignum.integer import Integer

i = Integer()
i.from_sign_and_mag(1, [1, 2, 3])
print(str(i))                # 18446744082299486211
print(i.get_sign_and_mag())  # (1, [1, 2, 3])

i.from_string("-10")         # raises ValueError for text that is not base 10
print(i.to_json())           # -10
```

`Integer` holds its value as a plain Python `int` in `value`; it does not
provide arithmetic of its own.

## Network helpers

```python
from gostutil.netutil import match_ip, host_address, host_port, get_local_ip

match_ip("206.0.68-69.0", "206.0.68.0", "8080")        # True
match_ip("206.0.68.0/23", "206.0.68.123", "8080")      # True
match_ip("[1fff:0:a88:85a3::ac1f]:8080", "1fff:0:a88:85a3::ac1f", "8080")  # True
host_address("127.0.0.1", 8080)                        # "127.0.0.1:8080"
host_port("127.0.0.1:8080")                            # ("127.0.0.1", "8080")
get_local_ip()                                         # an IPv4 address, private ones first
```

`listen_on_tcp_random_port(ip)` and `listen_on_udp_random_port(ip)` return
IPv4 sockets bound to a free port. `conn_check(sock)` raises `EOFError` if
the peer has closed the connection and `ConnectionError` if unread data is
waiting. `is_same_addr` compares two `Address` values, treating `[::]` and
`0.0.0.0` hosts as equal.

## Math helpers

```python
from gostutil.mathutil import abs_int8, delta_compare_float64

abs_int8(-127)                                   # 127
abs_int8(-128)                                   # -128 (wraps, as in 8-bit arithmetic)
delta_compare_float64(12.3334, 12.3344, 0.01)    # True
```

## What it does not do

This is a library only: it has no command-line tool and starts no server.

## Running the tests

```
pip install "gostutil[test]"
pytest
```