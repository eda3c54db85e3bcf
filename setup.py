"""
Packaging script for PyPI.
"""
import setuptools

setuptools.setup(
	name='lalg-lang',
	version='0.1.0',
	packages=['lalg'],
	entry_points={
		'console_scripts': ["lalg = lalg.cmdline:main"],
	},
	license='MIT',
	description='A single-pass translator and stack-machine interpreter for a small indentation-delimited teaching language',
	long_description=open('README.md').read(),
	long_description_content_type="text/markdown",
	classifiers=[
		"Programming Language :: Python :: 3.12",
		"License :: OSI Approved :: MIT License",
		"Operating System :: OS Independent",
		"Development Status :: 3 - Alpha",
		"Intended Audience :: Education",
		"Topic :: Software Development :: Interpreters",
		"Topic :: Software Development :: Compilers",
		"Topic :: Education",
		"Environment :: Console",
	],
	python_requires='>=3.11',
	install_requires=[
		"booze-tools>=0.6.2.1",
	],
	extras_require={
		'test': ["pytest"],
	},
)
