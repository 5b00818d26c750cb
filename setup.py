import os.path
import re

from setuptools import find_packages, setup

try:
    # Import all script providers so that ENTRYPOINTS gets populated.
    from offloadlib.scripts import offload  # noqa: F401
    from offloadlib.scripts.utils import ENTRYPOINTS
except ImportError:
    # Avoid chicken-and-egg dependency requirements during initial installation.
    # This means you need to re-run setup in order to gain script entrypoints.
    ENTRYPOINTS = []


HERE = os.path.abspath(os.path.dirname(__file__))

README = os.path.join(HERE, "README.rst")


def version():
    with open(os.path.join(HERE, "debian", "changelog")) as log:
        first = next(l for l in log if l.strip())
    return re.split("[()]", first)[1].replace("~", "")


setup(name="offloadlib",
      version=version(),
      description="Idempotent runtime and boot-time disabling of NIC offloads via ethtool and systemd.",
      long_description=open(README).read(),
      long_description_content_type="text/x-rst",
      author="Homelab Sysadmins",
      author_email="sysadmins@localhost",
      platforms=["Linux"],
      python_requires=">=3.6",
      install_requires=["docopt", "jinja2"],
      packages=find_packages(exclude=["tests"]),
      package_data={"offloadlib": ["templates/*.j2"]},
      entry_points={"console_scripts": ENTRYPOINTS})
