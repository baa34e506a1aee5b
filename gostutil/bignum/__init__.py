"""Fixed-point decimals with arithmetic and a comparable binary encoding, and big integers."""