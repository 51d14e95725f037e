from seed_tickler.oracle import PublicKey

# RSA public key 0x136 from the supplier bootloader (SBOOT) binary.
SUPPLIER_BOOTLOADER_MODULUS_HEX = (
    "de5a5615fdda3b76b4ecd8754228885e7bf11fdd6c8c18ac24230f7f770006cf"
    "e60465384e6a5ab4daa3009abc65bff2abb1da1428ce7a925366a14833dcd181"
    "83bad61b2c66f0d8b9c4c90bf27fe9d1c55bf2830306a13d4559df60783f5809"
    "547ffd364dbccea7a7c2fc32a0357ceba3e932abcac6bd6398894a1a22f63bdc"
    "45b5da8b3c4e80f8c097ca7ffd18ff6c78c81e94c016c080ee6c5322e1aeb59d"
    "2123dce1e4dd20d0f1cdb017326b4fd813c060e8d2acd62e703341784dca6676"
    "32233de57db820f149964b3f4f0c785c39e2534a7ae36fd115b9f06457822f8a"
    "9b7ce7533777a4fb03610d6b4018ab332be4e7ad2f4ac193040e5a037417bc53"
)

SUPPLIER_BOOTLOADER_KEY = PublicKey.from_hex(SUPPLIER_BOOTLOADER_MODULUS_HEX, 65537)
