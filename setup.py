from setuptools import setup
import os

def readme(fname):
    return open(os.path.join(os.path.dirname(__file__), fname)).read()

setup(
    name='gibbsref',
    version='0.1.0',
    description='Reference Gibbs energy expressions from sublattice models.',
    packages=['gibbsref'],
    package_data={
        'gibbsref': ['input-schema.yaml']
    },
    license='MIT',
    long_description=readme('README.rst'),
    long_description_content_type='text/x-rst',
    python_requires='>=3.8',
    install_requires=[
        'cerberus',
        'pycalphad>=0.10',
        'pydantic>=2',
        'pyyaml',
        'symengine',
        'sympy>=1.5.1',
        'tinydb>=4.7',
    ],
    extras_require={
        'dev': [
            'pytest',
        ],
    },
    classifiers=[
        # How mature is this project? Common values are
        #   3 - Alpha
        #   4 - Beta
        #   5 - Production/Stable
        'Development Status :: 3 - Alpha',

        'Intended Audience :: Science/Research',
        'Topic :: Scientific/Engineering :: Physics',
        'Topic :: Scientific/Engineering :: Chemistry',

        'License :: OSI Approved :: MIT License',

        'Programming Language :: Python :: 3',
    ],
    entry_points={'console_scripts': [
                  'gibbsref = gibbsref.gibbsref_script:main']}

)
