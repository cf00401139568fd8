"""Test vectors for nostr-core cross-implementation testing."""

# Secret key 1 maps to the secp256k1 generator point
SECRET_ONE_HEX = "0000000000000000000000000000000000000000000000000000000000000001"
GENERATOR_X_HEX = "79be667ef9dcbbac55a06295ce870b07029bfcdb2dce28d959f2815b16f81798"

# Fixed keys for the two parties in messaging tests
ALICE_SECRET_HEX = "0101010101010101010101010101010101010101010101010101010101010101"
BOB_SECRET_HEX = "0202020202020202020202020202020202020202020202020202020202020202"

# BIP-340 test vectors 0 and 1
BIP340_VECTORS = [
    {
        "secret": "0000000000000000000000000000000000000000000000000000000000000003",
        "public": "f9308a019258c31049344f85f89d5229b531c845836f99b08601f113bce036f9",
        "aux": "0000000000000000000000000000000000000000000000000000000000000000",
        "message": "0000000000000000000000000000000000000000000000000000000000000000",
        "signature": (
            "e907831f80848d1069a5371b402410364bdf1c5f8307b0084c55f1ce2dca8215"
            "25f66a4a85ea8b71e482a74f382d2ce5ebeee8fdb2172f477df4900d310536c0"
        ),
    },
    {
        "secret": "b7e151628aed2a6abf7158809cf4f3c762e7160f38b4da56a784d9045190cfef",
        "public": "dff1d77f2a671c5f36183726db2341be58feae1da2deced843240f7b502ba659",
        "aux": "0000000000000000000000000000000000000000000000000000000000000001",
        "message": "243f6a8885a308d313198a2e03707344a4093822299f31d0082efa98ec4e6c89",
        "signature": (
            "6896bd60eeae296db48a229ff71dfe071bde413e6d43f917dc8dcf8c78de3341"
            "8906d11ac976abccb20b091292bff4ea897efcb639ea871cfa95f6de339e4b0a"
        ),
    },
]

# NIP-19 examples
NPUB_HEX = "7e7e9c42a91bfef19fa929e5fda1b72e0ebc1a4c1141673e2794234d86addf4e"
NPUB = "npub10elfcs4fr0l0r8af98jlmgdh9c8tcxjvz9qkw038js35mp4dma8qzvjptg"
NSEC_HEX = "67dea2ed018072d675f5415ecfaed7d2597555e202d85b3d65ea4e58d2d92ffa"
NSEC = "nsec1vl029mgpspedva04g90vltkh6fvh240zqtv9k0t9af8935ke9laqsnlfe5"

# Test messages covering edge cases
TEST_MESSAGES = {
    "empty": "",
    "single_char": "X",
    "whitespace": "   \t\n   ",
    "punctuation": "!@#$%^&*()_+-=[]{}\\|;':\",./<>?",
    "newlines": "Line 1\nLine 2\nLine 3",
    "emoji": "Hello \U0001f44b World \U0001f30d",
    "chinese": "你好世界 - Hello World",
    "accents": "Café résumé naïve",
    "json": '{"key": "value", "num": 42}',
    "exactly_32": "A" * 32,
    "just_over_32": "A" * 33,
    "long_text": "The quick brown fox jumps over the lazy dog. " * 11,
    "large": "B" * 5000,
}

# BIP-340 vector 5: an x-coordinate with no point on the curve
OFF_CURVE_X_HEX = "eefdea4cdb677750a420fee807eacf21eb9898ae79b9768766e4faa04a2d4a34"

# Conversation key for secret keys 1 and 2
SECRET_TWO_HEX = "0000000000000000000000000000000000000000000000000000000000000002"
CONVERSATION_KEY_ONE_TWO_HEX = "c41c775356fd92eadc63ff5a0dc1da211b268cbea22316767095b2871ea1412d"

# Public key for secret 0x01 repeated 32 times
ALICE_PUBLIC_HEX = "1b84c5567b126440995d3ed5aaba0565d71e1834604819ff9c17f5e9d5dd078f"

# Published modern cipher vector: secrets 1 and 2, nonce 00..01, plaintext "a"
MODERN_NONCE_HEX = "0000000000000000000000000000000000000000000000000000000000000001"
MODERN_PAYLOAD_A = (
    "AgAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAABee0G5VSK0/9YypIObAtDKfYEAjD35uVkHyB0F4Dw"
    "rcNaCXlCWZKaArsGrY6M9wnuTMxWfp1RTN9Xga8no+kF5Vsb"
)

# Ciphertext of the empty message under the same key and nonce. The padded
# buffers of "" and "a" differ only in bytes 1 and 2.
MODERN_EMPTY_CIPHERTEXT_HEX = (
    "79ec67e5548ad3ff58ca920e6c0b4329f6040230f7e6e5641f20741780f0adc35a09"
)
