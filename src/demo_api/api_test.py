import pytest
from fastapi.testclient import TestClient

from demo_api import api, crypto
from seed_tickler.candidate import candidate_for_seed
from seed_tickler.oracle import PublicKey
from seed_tickler.progress import SearchStatus
from seed_tickler.search import TargetPrefix, search_seeds


@pytest.fixture(scope="module")
def key_dir(tmp_path_factory):
    key_dir = tmp_path_factory.mktemp("keys")
    with pytest.MonkeyPatch.context() as mp:
        mp.setattr(crypto, "KEY_DIR", key_dir)
        yield key_dir


@pytest.fixture
def client(key_dir):
    api.LAST_BOOT["boot"] = None
    return TestClient(api.app)


class TestDemoApi:
    """Test suite for the leaky bootloader demo API"""

    def test_key(self, client, key_dir):
        """The public key is generated once and persisted"""
        response = client.get("/api/key")
        assert response.status_code == 200
        data = response.json()
        assert data["bits"] == 2048
        assert data["exponent"] == 65537
        assert (key_dir / crypto.KEY_FILE_NAME).exists()
        assert client.get("/api/key").json() == data

    def test_verify_before_boot(self, client):
        """Verification needs a simulated boot"""
        response = client.post("/api/verify", json={"seed": "1"})
        assert response.status_code == 409

    def test_boot_and_recover(self, client):
        """The leaked prefix leads a search back to the boot seed"""
        key_data = client.get("/api/key").json()
        key = PublicKey.from_hex(key_data["modulus_hex"], key_data["exponent"])

        boot = client.get("/api/boot", params={"window_size": 8}).json()
        assert boot["window_size"] == 8
        target = TargetPrefix(int(boot["prefix_hex"], 16), 8)

        result = search_seeds(key, target, int(boot["window_start"], 16), count=boot["window_size"])
        assert result.status is SearchStatus.FOUND

        response = client.post("/api/verify", json={"seed": f"{result.seed:08X}"})
        assert response.status_code == 200
        assert response.json() == {
            "valid": True,
            "key_data_hex": bytes(candidate_for_seed(result.seed)).hex(),
        }

    def test_wrong_seed(self, client):
        """A wrong seed is rejected"""
        client.get("/api/boot", params={"window_size": 1})
        wrong = api.LAST_BOOT["boot"].seed ^ 0x10
        response = client.post("/api/verify", json={"seed": f"{wrong:08X}"})
        assert response.json() == {"valid": False, "key_data_hex": None}

    @pytest.mark.parametrize("window_size", [0, (1 << 20) + 1])
    def test_boot_window_bounds(self, client, window_size):
        response = client.get("/api/boot", params={"window_size": window_size})
        assert response.status_code == 422

    @pytest.mark.parametrize("seed", ["", "0x1", "123456789", "zz"])
    def test_verify_rejects_malformed_seed(self, client, seed):
        client.get("/api/boot", params={"window_size": 1})
        response = client.post("/api/verify", json={"seed": seed})
        assert response.status_code == 422


class TestSimulateBoot:
    """Test suite for the boot simulation"""

    def test_seed_inside_window(self, key_dir):
        key = crypto.get_public_key()
        boot = crypto.simulate_boot(key, 16)
        offset = ((boot.seed - boot.window_start) & 0xFFFFFFFF) // 2
        assert 0 <= offset < 16
        assert boot.seed & 1
        assert boot.candidate == bytes(candidate_for_seed(boot.seed))
        assert boot.leaked_prefix == int.from_bytes(boot.ciphertext[:8], "little")
