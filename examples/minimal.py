import sandrun as sr


def main():
	cfg = sr.SandboxConfig(tag="minimal", echo_stdout=True, install_jitter_s=0)
	result = sr.run_sandboxed(cfg, "echo hello > greeting.txt; cat greeting.txt; ls -a")
	print(f"exit={result.exit_code} steps={len(result.steps)}")


if __name__ == "__main__":
	main()
