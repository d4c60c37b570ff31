from workstation_setup.cli import run_workstation

if __name__ == "__main__":
    run_workstation()
