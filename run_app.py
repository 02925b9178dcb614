import os
import socket
import subprocess
import sys
import time

import psutil
import streamlit.web.cli as stcli

CHILD_FLAG = "--streamlit-child"
MAX_RESTARTS_PER_MINUTE = 8


def resolve_path(path):
    """Absolute path to a file shipped next to this launcher."""
    return os.path.join(os.path.dirname(os.path.abspath(__file__)), path)


def _env_int(name, default):
    try:
        return int(os.environ.get(name, str(default)).strip())
    except ValueError:
        return default


def _env_flag(name, default="0"):
    return os.environ.get(name, default).strip().lower() in ("1", "true", "yes", "on")


def resolve_server_address():
    env_address = os.environ.get("USERS_SERVER_ADDRESS", "").strip()
    if env_address:
        return env_address
    if os.path.exists("/.dockerenv"):
        return "0.0.0.0"
    return "localhost"


def build_streamlit_args(app_path, address, port):
    return [
        app_path,
        f"--server.port={port}",
        f"--server.address={address}",
        "--server.headless=true",
        "--global.developmentMode=false",
    ]


def run_streamlit_child(argv):
    """Run Streamlit in child mode inside this process: argv is [app_path, *flags]."""
    if not argv:
        print("Missing app path for child mode.")
        return 2
    old_argv = sys.argv[:]
    sys.argv = ["streamlit", "run", *argv]
    try:
        stcli.main()
        return 0
    except SystemExit as e:
        return e.code or 0
    finally:
        sys.argv = old_argv


def is_port_busy(port, host="127.0.0.1", timeout=0.25):
    sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    sock.settimeout(timeout)
    try:
        return sock.connect_ex((host, port)) == 0
    except OSError:
        return False
    finally:
        sock.close()


def _is_app_process(proc):
    try:
        cmdline = " ".join(proc.cmdline()).lower()
    except (psutil.AccessDenied, psutil.ZombieProcess, psutil.NoSuchProcess):
        return False
    return "streamlit" in cmdline and ("app.py" in cmdline or CHILD_FLAG in cmdline)


def _terminate_pid(pid, force=False):
    try:
        proc = psutil.Process(pid)
        if not force and not _is_app_process(proc):
            return False
        print(f"Stopping stale process {proc.name()} (PID: {pid})...")
        proc.terminate()
        try:
            proc.wait(timeout=3)
        except psutil.TimeoutExpired:
            proc.kill()
        return True
    except (psutil.NoSuchProcess, psutil.AccessDenied, psutil.ZombieProcess):
        return False


def kill_proc_on_port(port, force=False):
    """Stops a previous app instance still bound to the port. Returns True if one was stopped."""
    if not is_port_busy(port):
        return False
    try:
        connections = psutil.net_connections(kind="inet")
    except (psutil.AccessDenied, PermissionError):
        connections = []
    for conn in connections:
        lport = getattr(conn.laddr, "port", None) if conn.laddr else None
        if lport == port and conn.pid and conn.pid != os.getpid():
            if _terminate_pid(conn.pid, force=force):
                return True
    return False


def main():
    if len(sys.argv) > 1 and sys.argv[1] == CHILD_FLAG:
        return run_streamlit_child(sys.argv[2:])

    app_path = resolve_path("app.py")
    port = _env_int("USERS_SERVER_PORT", 8501)
    address = resolve_server_address()
    force_port_cleanup = _env_flag("USERS_FORCE_PORT_CLEANUP")
    restart_exit_code = _env_int("USERS_RESTART_EXIT_CODE", 42)
    restart_exit_codes = {1, restart_exit_code}

    print("Starting Users app...")
    restart_count = 0
    last_restart = time.time()
    while True:
        try:
            kill_proc_on_port(port, force=force_port_cleanup)
            if is_port_busy(port):
                print(f"Port {port} is in use by a non-app process. Refusing to terminate it.")
                if not force_port_cleanup:
                    print("Set USERS_FORCE_PORT_CLEANUP=1 to terminate any process on this port.")
                return 1

            argv = [sys.executable, os.path.abspath(__file__), CHILD_FLAG] + build_streamlit_args(app_path, address, port)
            exit_code = subprocess.Popen(argv).wait()
            if exit_code == 0:
                print("Application stopped gracefully (Exit Code 0).")
                return 0

            now = time.time()
            restart_count = restart_count + 1 if now - last_restart <= 60 else 1
            last_restart = now
            if restart_count >= MAX_RESTARTS_PER_MINUTE:
                print("Too many restarts. Exiting.")
                return exit_code if exit_code not in restart_exit_codes else 1

            delay = 2 if exit_code in restart_exit_codes else 5
            print(f"Exit code {exit_code}. Restarting in {delay} seconds...")
            time.sleep(delay)
        except KeyboardInterrupt:
            print("\nManual interruption. Exiting...")
            return 130


if __name__ == "__main__":
    sys.exit(main())
