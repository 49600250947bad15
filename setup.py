import os
from setuptools import setup, find_packages

try:
    here = os.path.dirname(os.path.abspath(__file__))
    with open(os.path.join(here, 'README.txt')) as f:
        description = f.read()
except (IOError, OSError):
    description = ''

version = "0.1"

dependencies = ['PyYAML',
                'mozlog',
                'mozinfo',
                'protobuf >= 4.22',
                ]

setup(name='pprofenc',
      version=version,
      description="Encodes sampled call stacks into pprof profiles.",
      long_description=description,
      classifiers=[], # Get strings from http://www.python.org/pypi?%3Aaction=list_classifiers
      license='MPL',
      packages=find_packages(exclude=['ez_setup', 'examples', 'tests']),
      include_package_data=True,
      zip_safe=False,
      python_requires='>=3.8',
      install_requires=dependencies,
      entry_points="""
      # -*- Entry points: -*-
      [console_scripts]
      pprofenc = pprofenc.run_encoder:main
      """,
      )
