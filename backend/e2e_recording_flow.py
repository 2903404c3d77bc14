"""
Walkthrough of the recording flow against a running server

NOTE: before running you need the server up (uvicorn main:app --reload).

    python e2e_recording_flow.py [BASE_URL]
"""
import sys
import uuid

from client.api_client import ApiClient, ApiError

# Configuration
BASE_URL = sys.argv[1] if len(sys.argv) > 1 else "http://localhost:8000"

# Output colors
GREEN = '\033[92m'
RED = '\033[91m'
BLUE = '\033[94m'
RESET = '\033[0m'


def print_step(step_number: int, description: str):
    """Print formatted step"""
    print(f"\n{BLUE}{'='*60}")
    print(f"STEP {step_number}: {description}")
    print(f"{'='*60}{RESET}\n")


def print_success(message: str):
    print(f"{GREEN}✓ {message}{RESET}")


def print_error(message: str):
    print(f"{RED}✗ {message}{RESET}")


def run():
    suffix = uuid.uuid4().hex[:8]
    owner = ApiClient(BASE_URL)
    other = ApiClient(BASE_URL)

    print_step(1, "Register owner")
    owner.register(f"owner-{suffix}@x.com", "pw1")
    print_success(f"Owner registered: {owner.get_profile()['id']}")

    print_step(2, "Create recording and upload a single final chunk")
    recording = owner.create_recording(name="Walkthrough")
    chunk = owner.upload_chunk(recording["id"], b"\x1a" * 1000, chunk_index=0, is_last_chunk=True)
    print_success(f"Chunk stored: index={chunk['chunkIndex']} size={chunk['size']}")

    details = owner.get_recording(recording["id"])
    if details["status"] == "COMPLETED" and details["totalSize"] == 1000 and details["duration"] == 1:
        print_success("Recording COMPLETED with totalSize=1000 and duration=1")
    else:
        print_error(f"Unexpected recording state: {details}")
        return 1

    audio, content_type = owner.stream_recording(recording["id"])
    print_success(f"Streamed {len(audio)} bytes ({content_type})")

    print_step(3, "Second user cannot see the owner's recording")
    other.register(f"other-{suffix}@x.com", "pw2")
    try:
        other.get_recording(recording["id"])
        print_error("Second user could read the recording!")
        return 1
    except ApiError as e:
        if e.status_code != 404:
            print_error(f"Expected 404, got {e.status_code}")
            return 1
        print_success("Cross-user access rejected with 404")

    print_step(4, "Delete recording")
    print_success(owner.delete_recording(recording["id"]))
    return 0


if __name__ == "__main__":
    sys.exit(run())
