"""
Packaging script for PyPI.
"""
import setuptools

setuptools.setup(
	name='lexscope',
	version='0.1.0',
	packages=['lexscope', "lexscope.tree_walker", ],
	package_data={
		'lexscope': ["grammar.lark"],
	},
	entry_points={
		'console_scripts': ["lexscope = lexscope.cmdline:main"],
	},
	license='MIT',
	description='A small R-flavoured interpreter that shows how lexical scoping resolves free variables',
	long_description=open('README.md').read(),
	long_description_content_type="text/markdown",
	classifiers=[
		"Programming Language :: Python :: 3.9",
		"License :: OSI Approved :: MIT License",
		"Operating System :: OS Independent",
		"Development Status :: 3 - Alpha",
		"Intended Audience :: Developers",
		"Intended Audience :: Education",
		"Topic :: Software Development :: Interpreters",
		"Topic :: Education",
		"Environment :: Console",
    ],
	python_requires='>=3.9',
	install_requires=[
		"lark>=1.1.5",
	]
)
