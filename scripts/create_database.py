import os
import subprocess

# ======================
# Global Config
# ======================

MYSQL_IMAGE = "mysql:oraclelinux9"
MYSQL_ROOT_PASSWORD = "1234"

CONTAINER_NAME = "mysql-dp"
PORT = 33061
DATA_DIR = "./data/mysql-dp"
INIT_DIR = "./scripts/db-init/dp"

# ======================
# Utils
# ======================

def run(cmd: list[str]):
    print(">>", " ".join(cmd))
    subprocess.run(cmd, check=True)


def remove_container_if_exists(name: str):
    subprocess.run(
        ["docker", "rm", "-f", name],
        stdout=subprocess.DEVNULL,
        stderr=subprocess.DEVNULL,
    )


# ======================
# Main Logic
# ======================

def start_mysql():
    os.makedirs(DATA_DIR, exist_ok=True)

    if not os.path.isdir(INIT_DIR):
        raise RuntimeError(f"Init SQL directory not found: {INIT_DIR}")

    remove_container_if_exists(CONTAINER_NAME)

    run([
        "docker", "run", "-d",
        "--name", CONTAINER_NAME,
        "-e", f"MYSQL_ROOT_PASSWORD={MYSQL_ROOT_PASSWORD}",
        "-p", f"{PORT}:3306",
        "-v", f"{os.path.abspath(DATA_DIR)}:/var/lib/mysql",
        "-v", f"{os.path.abspath(INIT_DIR)}:/docker-entrypoint-initdb.d",
        MYSQL_IMAGE
    ])

    print(f"{CONTAINER_NAME} started at localhost:{PORT}")


def main():
    start_mysql()
    print("Set MYSQL_PORT=%d to point the integration tests at it." % PORT)


if __name__ == "__main__":
    main()
